import logging
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional, TypeVar
from uuid import UUID

from snackbar.core.errors import (
    AdditionNotFound,
    CatalogEntryNotFound,
    InvalidQuantity,
    InvalidReference,
    ProductNotFound,
    StorageFailure,
)
from snackbar.domain import (
    NIL_ID,
    AdditionSnapshot,
    SaleDomain,
    SaleDraft,
    SaleItemDomain,
    SaleItemDraft,
)
from snackbar.services.catalog_resolver import CatalogResolver


logger = logging.getLogger(__name__)

T = TypeVar("T")

def utc_now() -> datetime:
    return datetime.now(UTC)


class SalePricingEngine:
    """
    Turns a submitted order into a priced sale using current catalog prices.

    Pricing is a pure transform: the SaleDraft is read, never modified, and a
    new SaleDomain is returned. Validation is fail-fast; the first invalid or
    unresolved reference aborts the whole sale before anything is stored.
    """

    def __init__(self, resolver: CatalogResolver, clock: Callable[[], datetime] = utc_now) -> None:
        """
        Initializes the engine.

        Args:
            resolver (CatalogResolver): Source of product and add-on snapshots.
            clock (Callable[[], datetime]): Supplies the date of undated sales.
        """
        self.resolver = resolver
        self.clock = clock

    def _resolve(
        self,
        lookup: Callable[[UUID], Optional[T]],
        entry_id: UUID,
        not_found: type[CatalogEntryNotFound],
    ) -> T:
        """
        Runs one catalog lookup, reporting both absence and lookup failure as not found.

        Raises:
            CatalogEntryNotFound: The given subclass, if the entry cannot be resolved.
        """
        try:
            entry = lookup(entry_id)
        except StorageFailure as e:
            logger.warning(f"{not_found.kind} {entry_id} could not be resolved: {e}")
            raise not_found(entry_id) from e
        if entry is None:
            raise not_found(entry_id)
        return entry

    def price_item(self, draft: SaleItemDraft) -> SaleItemDomain:
        """
        Prices one line of the order.

        Args:
            draft (SaleItemDraft): The submitted line.

        Returns:
            SaleItemDomain: The line with catalog unit price, add-on snapshots
                and total price.

        Raises:
            InvalidReference: If the product or an add-on ID is nil.
            ProductNotFound: If the product cannot be resolved.
            InvalidQuantity: If the quantity is not positive.
            AdditionNotFound: If an add-on cannot be resolved.
        """
        if draft.product_id == NIL_ID:
            raise InvalidReference("product")

        product = self._resolve(self.resolver.resolve_product, draft.product_id, ProductNotFound)

        if draft.quantity <= 0:
            raise InvalidQuantity(draft.quantity)

        snapshots = []
        for ref in draft.additions:
            if ref.id == NIL_ID:
                raise InvalidReference("addition")
            addition = self._resolve(self.resolver.resolve_addition, ref.id, AdditionNotFound)
            snapshots.append(
                AdditionSnapshot(id=ref.id, name=addition.name, price=addition.price)
            )

        additions_price = sum((s.price for s in snapshots), Decimal("0"))
        return SaleItemDomain(
            product_id=draft.product_id,
            quantity=draft.quantity,
            unit_price=product.price,
            total_price=(product.price + additions_price) * draft.quantity,
            additions=snapshots,
        )

    def price_sale(self, candidate: SaleDraft) -> SaleDomain:
        """
        Prices a whole order.

        Items are priced in submission order. The sale total is the sum of the
        item totals minus the discount plus the additional charges. An undated
        sale is dated now; an explicit date is kept as given.

        Args:
            candidate (SaleDraft): The submitted order.

        Returns:
            SaleDomain: A new, fully priced sale ready to be stored.
        """
        items = [self.price_item(draft) for draft in candidate.items]
        subtotal = sum((item.total_price for item in items), Decimal("0"))

        return SaleDomain(
            id=candidate.id,
            date=candidate.date or self.clock(),
            total_amount=subtotal - candidate.discount + candidate.additional_charges,
            discount=candidate.discount,
            additional_charges=candidate.additional_charges,
            items=items,
        )
