import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from snackbar.core.deadline import Deadline
from snackbar.core.errors import OperationCancelled, SaleNotFound, StorageFailure
from snackbar.data_access.models import DbAddition, DbProduct, DbSaleItemAddition
from snackbar.domain import NIL_ID, AdditionRef, SaleDomain, SaleDraft, SaleItemDraft
from snackbar.services.catalog_resolver import SqlCatalogResolver
from snackbar.services.pricing import SalePricingEngine
from snackbar.services.sale_store import SaleStore


RowCounts = Callable[[], tuple[int, int, int]]


def priced_sale(session: Session, catalog: dict[str, Any], **overrides: Any) -> SaleDomain:
    """Two items: burger + bacon x2 (25.00) and burger + bacon + cheddar x1 (15.00)."""
    draft = SaleDraft(
        items=[
            SaleItemDraft(
                product_id=catalog["product_id"],
                quantity=2,
                additions=[AdditionRef(id=catalog["bacon_id"])],
            ),
            SaleItemDraft(
                product_id=catalog["product_id"],
                quantity=1,
                additions=[AdditionRef(id=catalog["bacon_id"]), AdditionRef(id=catalog["cheese_id"])],
            ),
        ],
        **overrides,
    )
    return SalePricingEngine(SqlCatalogResolver(session)).price_sale(draft)


class TripwireDeadline(Deadline):
    """Cancels the work right before the stage whose name starts with `trip_on`."""

    def __init__(self, trip_on: str) -> None:
        super().__init__()
        self.trip_on = trip_on

    def check(self, stage: str) -> None:
        if stage.startswith(self.trip_on):
            raise OperationCancelled(f"Operation cancelled before {stage}.")


# --- 1. Create + GetByID ---

def test_round_trip_preserves_the_aggregate(session: Session, catalog: dict[str, Any]) -> None:
    store = SaleStore(session)
    stored = store.create(priced_sale(session, catalog))

    loaded = store.get_by_id(stored.id)

    assert loaded == stored
    assert loaded.total_amount == Decimal("40.00")
    assert [i.item_id for i in loaded.items] == [1, 2]
    assert all(i.sale_id == stored.id for i in loaded.items)
    assert [a.name for a in loaded.items[1].additions] == ["Bacon", "Cheddar"]


def test_create_keeps_a_given_sale_id(session: Session, catalog: dict[str, Any]) -> None:
    sale_id = uuid4()
    stored = SaleStore(session).create(priced_sale(session, catalog, id=sale_id))
    assert stored.id == sale_id


def test_nil_sale_id_is_replaced(session: Session, catalog: dict[str, Any]) -> None:
    store = SaleStore(session)
    nil_sale = priced_sale(session, catalog).model_copy(update={"id": NIL_ID})

    first = store.create(nil_sale)
    second = store.create(nil_sale)

    assert NIL_ID not in (first.id, second.id)
    assert first.id != second.id
    assert store.get_by_id(first.id) == first
    assert store.get_by_id(NIL_ID) is None


def test_create_writes_every_record_set(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    SaleStore(session).create(priced_sale(session, catalog))
    assert row_counts() == (1, 2, 3)


def test_get_unknown_sale_returns_none(session: Session) -> None:
    assert SaleStore(session).get_by_id(uuid4()) is None


def test_snapshot_survives_catalog_changes(session: Session, catalog: dict[str, Any]) -> None:
    store = SaleStore(session)
    stored = store.create(priced_sale(session, catalog))

    product = session.get(DbProduct, catalog["product_id"])
    product.price = Decimal("99.00")
    session.add(product)
    session.delete(session.get(DbAddition, catalog["bacon_id"]))
    session.commit()

    loaded = store.get_by_id(stored.id)
    assert loaded.items[0].unit_price == Decimal("10.00")
    assert loaded.items[0].additions[0].id == catalog["bacon_id"]
    assert loaded.items[0].additions[0].price == Decimal("2.50")
    assert loaded.total_amount == Decimal("40.00")


# --- 2. Atomicity of the write path ---

def test_duplicate_sale_id_leaves_first_sale_untouched(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    store = SaleStore(session)
    first = store.create(priced_sale(session, catalog))

    with pytest.raises(StorageFailure):
        store.create(priced_sale(session, catalog, id=first.id))

    assert row_counts() == (1, 2, 3)
    assert store.get_by_id(first.id) == first


def test_failure_while_linking_additions_rolls_everything_back(
    session: Session,
    catalog: dict[str, Any],
    row_counts: RowCounts,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sale = priced_sale(session, catalog)
    original_add_all = session.add_all
    calls = {"links": 0}

    def failing_add_all(instances: Any) -> None:
        instances = list(instances)
        if instances and isinstance(instances[0], DbSaleItemAddition):
            calls["links"] += 1
            if calls["links"] == 2:
                raise OperationalError("INSERT INTO sale_item_addition", {}, Exception("disk I/O error"))
        original_add_all(instances)

    monkeypatch.setattr(session, "add_all", failing_add_all)

    with pytest.raises(StorageFailure):
        SaleStore(session).create(sale)

    assert calls["links"] == 2
    assert row_counts() == (0, 0, 0)


@pytest.mark.parametrize("stage", ["writing the sale items", "writing the add-ons of item 2", "commit"])
def test_cancellation_rolls_back(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts, stage: str
) -> None:
    with pytest.raises(OperationCancelled):
        SaleStore(session).create(priced_sale(session, catalog), TripwireDeadline(stage))
    assert row_counts() == (0, 0, 0)


def test_expired_deadline_writes_nothing(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    with pytest.raises(OperationCancelled):
        SaleStore(session).create(priced_sale(session, catalog), Deadline(timeout=0))
    assert row_counts() == (0, 0, 0)


def test_cancel_event_writes_nothing(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    cancelled = threading.Event()
    cancelled.set()
    with pytest.raises(OperationCancelled):
        SaleStore(session).create(priced_sale(session, catalog), Deadline(cancel_event=cancelled))
    assert row_counts() == (0, 0, 0)


# --- 3. List ---

def test_list_is_most_recent_first(session: Session, catalog: dict[str, Any]) -> None:
    store = SaleStore(session)
    base = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
    older = store.create(priced_sale(session, catalog, date=base - timedelta(days=1)))
    newest = store.create(priced_sale(session, catalog, date=base + timedelta(hours=1)))
    middle = store.create(priced_sale(session, catalog, date=base))

    sales = store.list()

    assert [s.id for s in sales] == [newest.id, middle.id, older.id]
    assert all(len(s.items) == 2 for s in sales)


def test_list_empty_store(session: Session) -> None:
    assert SaleStore(session).list() == []


# --- 4. Delete ---

def test_delete_removes_all_record_sets(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    store = SaleStore(session)
    kept = store.create(priced_sale(session, catalog))
    doomed = store.create(priced_sale(session, catalog))

    store.delete(doomed.id)

    assert store.get_by_id(doomed.id) is None
    assert store.get_by_id(kept.id) == kept
    assert row_counts() == (1, 2, 3)


def test_delete_unknown_sale(session: Session, catalog: dict[str, Any], row_counts: RowCounts) -> None:
    store = SaleStore(session)
    store.create(priced_sale(session, catalog))

    with pytest.raises(SaleNotFound):
        store.delete(uuid4())

    assert row_counts() == (1, 2, 3)


def test_delete_twice(session: Session, catalog: dict[str, Any]) -> None:
    store = SaleStore(session)
    stored = store.create(priced_sale(session, catalog))
    store.delete(stored.id)

    with pytest.raises(SaleNotFound):
        store.delete(stored.id)


def test_cancelled_delete_keeps_the_sale(
    session: Session, catalog: dict[str, Any], row_counts: RowCounts
) -> None:
    store = SaleStore(session)
    stored = store.create(priced_sale(session, catalog))

    with pytest.raises(OperationCancelled):
        store.delete(stored.id, TripwireDeadline("deleting the sale header"))

    assert row_counts() == (1, 2, 3)
    assert store.get_by_id(stored.id) == stored


def test_deleting_a_sale_leaves_the_catalog_alone(session: Session, catalog: dict[str, Any]) -> None:
    store = SaleStore(session)
    stored = store.create(priced_sale(session, catalog))
    store.delete(stored.id)

    assert session.get(DbProduct, catalog["product_id"]) is not None
    assert session.get(DbAddition, catalog["bacon_id"]) is not None
