from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AdditionDomain(BaseModel):
    """
    The pure domain representation of an Add-on.

    An add-on is an optional paid extra (an extra slice of cheese, bacon,
    a sauce) that can be attached to any item of a sale.

    Attributes:
        id (Optional[UUID]): The identifier, assigned on creation.
        name (str): The add-on name.
        price (Decimal): The add-on price, zero for free extras.
    """

    id: Optional[UUID] = Field(None, description="Assigned by the catalog on creation")
    name: str = Field(..., description="Name of the add-on", min_length=1)
    price: Decimal = Field(
        ...,
        description="Price charged per unit of the item it is attached to",
        ge=0,
        max_digits=10,
        decimal_places=2
    )

    @field_validator('name')
    @classmethod
    def clean_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Addition name cannot be empty or just whitespace.")
        return stripped

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "name": "Extra Bacon",
                "price": "2.50"
            }
        }
    )
