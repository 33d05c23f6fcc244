# 1. Standard Library
from collections.abc import Callable, Generator
from decimal import Decimal
from typing import Any

# 2. Third-Party Libraries
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, select

# 3. Application Layers
from snackbar.api.main import create_app
from snackbar.core.config import Settings
from snackbar.data_access.database import build_engine
from snackbar.data_access.models import (
    DbAddition,
    DbCategory,
    DbProduct,
    DbSale,
    DbSaleItem,
    DbSaleItemAddition,
)


# --- Setup: Isolated Testing Environment ---

@pytest.fixture(name="engine")
def engine_fixture() -> Generator[Engine, Any, None]:
    """A clean, in-memory SQLite database for every test."""
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine: Engine) -> Generator[Session, Any, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture(name="catalog")
def catalog_fixture(session: Session) -> dict[str, Any]:
    """Seeds one category, one 10.00 product and two 2.50 add-ons."""
    category = DbCategory(name="Burgers")
    session.add(category)
    session.commit()

    burger = DbProduct(name="Cheeseburger", price=Decimal("10.00"), category_id=category.id)
    bacon = DbAddition(name="Bacon", price=Decimal("2.50"))
    cheese = DbAddition(name="Cheddar", price=Decimal("2.50"))
    session.add_all([burger, bacon, cheese])
    session.commit()

    return {
        "category_id": category.id,
        "product_id": burger.id,
        "bacon_id": bacon.id,
        "cheese_id": cheese.id,
    }


def count_rows(session: Session, model: type[SQLModel]) -> int:
    return session.exec(select(func.count()).select_from(model)).one()


@pytest.fixture(name="row_counts")
def row_counts_fixture(session: Session) -> Callable[[], tuple[int, int, int]]:
    """Returns a callable giving the number of (sale, sale_item, sale_item_addition) rows."""
    def counts() -> tuple[int, int, int]:
        return (
            count_rows(session, DbSale),
            count_rows(session, DbSaleItem),
            count_rows(session, DbSaleItemAddition),
        )
    return counts


@pytest.fixture(name="client")
def client_fixture() -> Generator[TestClient, Any, None]:
    """An API client backed by its own in-memory database."""
    settings = Settings(
        DATABASE_URL="sqlite://",
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="password123",
    )
    app = create_app(settings)
    with TestClient(app) as client:
        client.auth = ("admin", "password123")
        yield client
