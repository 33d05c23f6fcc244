from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


# The nil UUID never identifies a catalog entry or a sale.
NIL_ID = UUID(int=0)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Reads naive datetimes as UTC; aware ones are kept as they are."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# --- Candidate order (what the client submits) ---

class AdditionRef(BaseModel):
    """
    A reference to a catalog add-on inside a submitted order.

    Only the identifier is used. A name or price sent by the client is
    accepted for convenience and then discarded in favor of the catalog.
    """
    id: UUID = Field(..., description="Identifier of the catalog add-on")
    name: Optional[str] = Field(None, description="Ignored, replaced by the catalog name")
    price: Optional[Decimal] = Field(None, description="Ignored, replaced by the catalog price")


class SaleItemDraft(BaseModel):
    """One line of a submitted order: a product, how many, and its add-ons."""
    product_id: UUID = Field(..., description="Identifier of the catalog product")
    quantity: int = Field(..., description="Units sold, must be greater than zero")
    additions: list[AdditionRef] = Field(default_factory=list)


class SaleDraft(BaseModel):
    """
    A candidate sale as submitted by the point of sale.

    Prices and totals are never read from here; they are computed by the
    pricing engine from the catalog.

    Attributes:
        id (Optional[UUID]): Optional client-chosen identifier; the nil UUID counts as absent.
        date (Optional[datetime]): When the sale happened; defaults to now.
        discount (Decimal): Amount subtracted from the subtotal.
        additional_charges (Decimal): Amount added to the subtotal.
        items (list[SaleItemDraft]): Ordered lines of the sale.
    """
    id: Optional[UUID] = Field(None, description="Assigned on creation if absent")
    date: Optional[datetime] = Field(None, description="Defaults to the creation time")
    discount: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    additional_charges: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    items: list[SaleItemDraft] = Field(default_factory=list)

    @field_validator('id')
    @classmethod
    def nil_id_means_absent(cls, v: Optional[UUID]) -> Optional[UUID]:
        return None if v == NIL_ID else v

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "discount": "0.00",
                "additional_charges": "1.00",
                "items": [
                    {
                        "product_id": "0b6f8e3c-1f0c-4d1e-9e39-8f5d2a1b7c11",
                        "quantity": 2,
                        "additions": [{"id": "5c2d9a8e-3b7f-4a61-8d40-6e1f0b2c9d33"}]
                    }
                ]
            }
        }
    }


# --- Priced aggregate (what gets stored and returned) ---

class AdditionSnapshot(BaseModel):
    """
    A copy of an add-on's identity, name and price taken when the sale was priced.

    It never changes afterwards, even if the catalog add-on is edited or deleted.
    """
    id: UUID
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True, frozen=True)


class SaleItemDomain(BaseModel):
    """
    One priced line of a sale.

    Attributes:
        sale_id (Optional[UUID]): Owning sale, set once the sale is stored.
        item_id (Optional[int]): Line number within the sale, set by the store.
        product_id (UUID): The product sold.
        quantity (int): Units sold.
        unit_price (Decimal): Product price at pricing time.
        total_price (Decimal): (unit_price + sum of add-on prices) * quantity.
        additions (list[AdditionSnapshot]): Add-ons in submission order.
    """
    sale_id: Optional[UUID] = None
    item_id: Optional[int] = None
    product_id: UUID
    quantity: int = Field(..., gt=0)
    unit_price: Decimal
    total_price: Decimal
    additions: list[AdditionSnapshot] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class SaleDomain(BaseModel):
    """
    The pure domain representation of a priced Sale (the aggregate root).

    Attributes:
        id (Optional[UUID]): The sale identifier, assigned by the store if absent.
        date (datetime): When the sale happened (UTC).
        total_amount (Decimal): Sum of item totals - discount + additional charges.
        discount (Decimal): Amount subtracted from the subtotal.
        additional_charges (Decimal): Amount added to the subtotal.
        items (list[SaleItemDomain]): Lines in submission order.
    """
    id: Optional[UUID] = None
    date: datetime
    total_amount: Decimal
    discount: Decimal = Decimal("0")
    additional_charges: Decimal = Decimal("0")
    items: list[SaleItemDomain] = Field(default_factory=list)

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    def subtotal(self) -> Decimal:
        """
        Sum of the line totals before discount and additional charges.

        Returns:
            Decimal: The subtotal of the sale.
        """
        return sum((item.total_price for item in self.items), Decimal("0"))

    model_config = ConfigDict(from_attributes=True)
