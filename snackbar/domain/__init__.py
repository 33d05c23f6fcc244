# snackbar/domain/__init__.py

# 1. Catalog Entities
from .addition import AdditionDomain
from .category import CategoryDomain
from .product import ProductDomain

# 2. Sale Aggregate
from .sale import (
    NIL_ID,
    AdditionRef,
    AdditionSnapshot,
    SaleDomain,
    SaleDraft,
    SaleItemDomain,
    SaleItemDraft,
)


__all__ = [
    "NIL_ID",
    "AdditionDomain",
    "AdditionRef",
    "AdditionSnapshot",
    "CategoryDomain",
    "ProductDomain",
    "SaleDomain",
    "SaleDraft",
    "SaleItemDomain",
    "SaleItemDraft",
]
