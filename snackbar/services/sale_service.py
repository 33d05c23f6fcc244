import logging
from typing import Optional
from uuid import UUID

from sqlmodel import Session

from snackbar.core.deadline import Deadline
from snackbar.core.errors import (
    CatalogEntryNotFound,
    InvalidReference,
    SaleNotFound,
    SaleValidationError,
)
from snackbar.domain import NIL_ID, SaleDomain, SaleDraft
from snackbar.services.catalog_resolver import CatalogResolver, SqlCatalogResolver
from snackbar.services.pricing import SalePricingEngine
from snackbar.services.sale_store import SaleStore


logger = logging.getLogger(__name__)

class SaleService:
    """
    Service layer for recording point-of-sale transactions.

    Creation goes through the pricing engine first and reaches the store only
    with a fully priced sale; reads and deletes go straight to the store.
    """

    def __init__(
        self,
        session: Session,
        resolver: Optional[CatalogResolver] = None,
        store: Optional[SaleStore] = None,
    ) -> None:
        """
        Initializes the SaleService with a database session.

        Args:
            session (Session): The active SQLModel/SQLAlchemy session.
            resolver (Optional[CatalogResolver]): Catalog lookups, defaults to the SQL catalog.
            store (Optional[SaleStore]): Sale persistence, defaults to the SQL store.
        """
        self.session = session
        self.pricing = SalePricingEngine(resolver or SqlCatalogResolver(session))
        self.store = store or SaleStore(session)

    def price_and_create_sale(
        self, candidate: SaleDraft, deadline: Optional[Deadline] = None
    ) -> SaleDomain:
        """
        Prices a submitted order against the catalog and stores it atomically.

        Args:
            candidate (SaleDraft): The order as submitted.
            deadline (Optional[Deadline]): Bound on the database write.

        Returns:
            SaleDomain: The stored sale with all identifiers assigned.

        Raises:
            SaleValidationError: If a reference is nil or a quantity is not positive.
            CatalogEntryNotFound: If a product or add-on does not exist.
            StorageFailure: If the write failed and was rolled back.
        """
        try:
            priced = self.pricing.price_sale(candidate)
        except (SaleValidationError, CatalogEntryNotFound) as e:
            logger.info(f"Sale rejected: {e}")
            raise
        return self.store.create(priced, deadline)

    def get_sale(self, sale_id: UUID, deadline: Optional[Deadline] = None) -> SaleDomain:
        """
        Retrieves a single sale by its identifier.

        Raises:
            InvalidReference: If the identifier is nil.
            SaleNotFound: If there is no such sale.
        """
        if sale_id == NIL_ID:
            raise InvalidReference("sale")
        sale = self.store.get_by_id(sale_id, deadline)
        if sale is None:
            raise SaleNotFound(sale_id)
        return sale

    def list_sales(self, deadline: Optional[Deadline] = None) -> list[SaleDomain]:
        """Retrieves every sale, most recent first."""
        return self.store.list(deadline)

    def delete_sale(self, sale_id: UUID, deadline: Optional[Deadline] = None) -> None:
        """
        Deletes a sale with all its items.

        Raises:
            InvalidReference: If the identifier is nil.
            SaleNotFound: If there is no such sale.
        """
        if sale_id == NIL_ID:
            raise InvalidReference("sale")
        self.store.delete(sale_id, deadline)
