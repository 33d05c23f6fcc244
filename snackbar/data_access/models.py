import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKeyConstraint
from sqlmodel import Field, SQLModel

# --- Catalog Tables ---

class DbCategory(SQLModel, table=True):
    __tablename__ = "category"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None

class DbProduct(SQLModel, table=True):
    __tablename__ = "product"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    description: Optional[str] = None
    category_id: uuid.UUID = Field(foreign_key="category.id")

class DbAddition(SQLModel, table=True):
    __tablename__ = "addition"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    price: Decimal = Field(max_digits=10, decimal_places=2)

# --- Sale Aggregate Tables ---

class DbSale(SQLModel, table=True):
    """Sale header row."""
    __tablename__ = "sale"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    date: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    total_amount: Decimal = Field(max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    additional_charges: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)

class DbSaleItem(SQLModel, table=True):
    """
    One line of a sale, keyed by (sale_id, item_id).

    product_id is a plain column: deleting a product from the catalog must
    not be blocked by, nor cascade into, historic sales.
    """
    __tablename__ = "sale_item"
    sale_id: uuid.UUID = Field(foreign_key="sale.id", primary_key=True)
    item_id: int = Field(primary_key=True)  # 1-based line number within the sale
    product_id: uuid.UUID = Field(index=True)
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)
    total_price: Decimal = Field(max_digits=12, decimal_places=2)

class DbSaleItemAddition(SQLModel, table=True):
    """
    Association between a sale line and an add-on.

    Holds the add-on snapshot (name and price at pricing time) so that the
    sale reads back the same even after the catalog entry changes or is gone.
    position keeps submission order and allows the same add-on twice.
    addition_id is deliberately not a foreign key, so deleting a catalog
    add-on neither fails on nor cascades into recorded sales.
    """
    __tablename__ = "sale_item_addition"
    __table_args__ = (
        ForeignKeyConstraint(
            ["sale_id", "item_id"],
            ["sale_item.sale_id", "sale_item.item_id"],
        ),
    )
    sale_id: uuid.UUID = Field(primary_key=True)
    item_id: int = Field(primary_key=True)
    position: int = Field(primary_key=True)
    addition_id: uuid.UUID = Field(index=True)
    name: str
    price: Decimal = Field(max_digits=10, decimal_places=2)
