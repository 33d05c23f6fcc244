from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryDomain(BaseModel):
    """
    The pure domain representation of a Product Category.

    Categories group the products on the menu. Every product must belong to
    exactly one category.

    Attributes:
        id (Optional[UUID]): The identifier, assigned on creation.
        name (str): The category name.
        description (Optional[str]): A brief explanation of what the category includes.
    """

    id: Optional[UUID] = Field(None, description="Assigned by the catalog on creation")
    name: str = Field(
        ...,
        description="The name of the category (e.g., Burgers, Drinks)",
        min_length=1,
        max_length=100
    )
    description: Optional[str] = Field(
        None,
        description="A detailed description of the category's scope"
    )

    @field_validator('name')
    @classmethod
    def clean_name(cls, v: str) -> str:
        """
        Trims the category name and rejects blank values.

        Args:
            v (str): The raw name string provided via the API.

        Returns:
            str: The trimmed category name.

        Raises:
            ValueError: If the name is empty or contains only whitespace.
        """
        stripped = v.strip()
        if not stripped:
            raise ValueError("Category name cannot be empty or just whitespace.")
        return stripped

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "name": "Burgers",
                "description": "Grilled sandwiches served on a bun."
            }
        }
    )
