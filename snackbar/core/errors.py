"""Error taxonomy for sale pricing and persistence.

Pricing errors are raised before anything touches the database and describe a
defect in the submitted order. Storage errors are raised only after the
running transaction has been rolled back, so a retry of the same request is
always safe.
"""

from uuid import UUID


class SaleError(Exception):
    """Base class for every error raised by the sale core."""


class SaleValidationError(SaleError):
    """The submitted order breaks a business rule."""


class InvalidReference(SaleValidationError):
    """A product or add-on reference is the nil identifier."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"A valid {kind} ID is required.")


class InvalidQuantity(SaleValidationError):
    def __init__(self, quantity: int) -> None:
        self.quantity = quantity
        super().__init__(f"Quantity must be positive, got {quantity}.")


class CatalogEntryNotFound(SaleError):
    """A referenced catalog entry could not be resolved."""

    kind = "Catalog entry"

    def __init__(self, entry_id: UUID) -> None:
        self.entry_id = entry_id
        super().__init__(f"{self.kind} with ID {entry_id} not found.")


class ProductNotFound(CatalogEntryNotFound):
    kind = "Product"


class AdditionNotFound(CatalogEntryNotFound):
    kind = "Addition"


class SaleNotFound(SaleError):
    def __init__(self, sale_id: UUID) -> None:
        self.sale_id = sale_id
        super().__init__(f"Sale with ID {sale_id} not found.")


class StorageFailure(SaleError):
    """A transaction could not begin, execute or commit."""


class OperationCancelled(StorageFailure):
    """The caller's deadline expired or its cancel signal fired mid-transaction."""
