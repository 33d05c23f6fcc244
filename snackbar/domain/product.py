from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductDomain(BaseModel):
    """
    The pure domain representation of a Product.

    Products are the priced entries of the menu. The price stored here is the
    live catalog price; sales copy it at the moment they are priced.

    Attributes:
        id (Optional[UUID]): The identifier, assigned on creation.
        name (str): The name of the product.
        price (Decimal): The unit price (must be strictly positive).
        description (Optional[str]): Free text shown on the menu.
        category_id (UUID): The category the product belongs to.
    """

    id: Optional[UUID] = Field(None, description="Assigned by the catalog on creation")
    name: str = Field(..., description="Name of the product", min_length=1)
    price: Decimal = Field(
        ...,
        description="Unit price",
        gt=0,
        max_digits=10,
        decimal_places=2
    )
    description: Optional[str] = Field(None, description="Full product description")
    category_id: UUID = Field(..., description="Reference to the owning category")

    @field_validator('name')
    @classmethod
    def clean_name(cls, v: str) -> str:
        """
        Trims the product name and rejects blank values.

        Args:
            v (str): The raw name string.

        Returns:
            str: The trimmed name.

        Raises:
            ValueError: If nothing is left after trimming.
        """
        stripped = v.strip()
        if not stripped:
            raise ValueError("Product name cannot be empty or just whitespace.")
        return stripped

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "name": "Cheeseburger",
                "price": "10.00",
                "description": "Beef patty, cheddar, lettuce and tomato.",
                "category_id": "7f9c1a52-8d0e-4c6b-9a77-2f1de0c4b6a1"
            }
        }
    )
