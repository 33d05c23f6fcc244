from collections.abc import Callable
from decimal import Decimal
from typing import Any
from uuid import uuid4

import pytest
from sqlmodel import Session

from snackbar.core.errors import (
    AdditionNotFound,
    InvalidQuantity,
    InvalidReference,
    ProductNotFound,
    SaleNotFound,
)
from snackbar.data_access.models import DbProduct
from snackbar.domain import NIL_ID, AdditionRef, SaleDraft, SaleItemDraft
from snackbar.services.sale_service import SaleService


RowCounts = Callable[[], tuple[int, int, int]]


def test_price_and_create_sale_scenario(session: Session, catalog: dict[str, Any]) -> None:
    """Product 10.00, add-on 2.50, quantity 2, no discount or surcharge -> 25.00."""
    service = SaleService(session)

    sale = service.price_and_create_sale(SaleDraft(items=[
        SaleItemDraft(
            product_id=catalog["product_id"],
            quantity=2,
            additions=[AdditionRef(id=catalog["bacon_id"])],
        )
    ]))

    assert sale.id is not None
    assert sale.items[0].total_price == Decimal("25.00")
    assert sale.total_amount == Decimal("25.00")
    assert service.get_sale(sale.id) == sale


def test_unknown_product_persists_nothing(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    with pytest.raises(ProductNotFound):
        SaleService(session).price_and_create_sale(SaleDraft(items=[
            SaleItemDraft(product_id=catalog["product_id"], quantity=1),
            SaleItemDraft(product_id=uuid4(), quantity=1),
        ]))
    assert row_counts() == (0, 0, 0)


def test_unknown_addition_persists_nothing(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    with pytest.raises(AdditionNotFound):
        SaleService(session).price_and_create_sale(SaleDraft(items=[
            SaleItemDraft(
                product_id=catalog["product_id"],
                quantity=2,
                additions=[AdditionRef(id=catalog["bacon_id"])],
            ),
            SaleItemDraft(
                product_id=catalog["product_id"],
                quantity=1,
                additions=[AdditionRef(id=uuid4())],
            ),
        ]))
    assert row_counts() == (0, 0, 0)


def test_zero_quantity_persists_nothing(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    with pytest.raises(InvalidQuantity):
        SaleService(session).price_and_create_sale(SaleDraft(items=[
            SaleItemDraft(product_id=catalog["product_id"], quantity=0)
        ]))
    assert row_counts() == (0, 0, 0)


def test_prices_come_from_the_catalog_at_pricing_time(session: Session, catalog: dict[str, Any]) -> None:
    service = SaleService(session)
    draft = SaleDraft(items=[SaleItemDraft(product_id=catalog["product_id"], quantity=1)])
    before = service.price_and_create_sale(draft)

    product = session.get(DbProduct, catalog["product_id"])
    product.price = Decimal("12.00")
    session.add(product)
    session.commit()
    after = service.price_and_create_sale(draft)

    assert service.get_sale(before.id).total_amount == Decimal("10.00")
    assert after.total_amount == Decimal("12.00")


def test_get_and_delete_reject_nil_id(session: Session) -> None:
    service = SaleService(session)
    with pytest.raises(InvalidReference):
        service.get_sale(NIL_ID)
    with pytest.raises(InvalidReference):
        service.delete_sale(NIL_ID)


def test_get_unknown_sale(session: Session) -> None:
    with pytest.raises(SaleNotFound):
        SaleService(session).get_sale(uuid4())


def test_delete_then_get(session: Session, catalog: dict[str, Any], row_counts: RowCounts) -> None:
    service = SaleService(session)
    sale = service.price_and_create_sale(SaleDraft(items=[
        SaleItemDraft(product_id=catalog["product_id"], quantity=1)
    ]))

    service.delete_sale(sale.id)

    with pytest.raises(SaleNotFound):
        service.get_sale(sale.id)
    assert service.list_sales() == []
    assert row_counts() == (0, 0, 0)
