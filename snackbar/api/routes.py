from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

# Security
from snackbar.api.auth import authenticate
from snackbar.core.deadline import Deadline

# Layer 4: Data Access (Session)
from snackbar.data_access.database import get_session

# Layer 3: Domain Entities (Pydantic models)
from snackbar.domain import (
    AdditionDomain,
    CategoryDomain,
    ProductDomain,
    SaleDomain,
    SaleDraft,
)

# Layer 2: Services
from snackbar.services.addition_service import AdditionService
from snackbar.services.category_service import CategoryService
from snackbar.services.product_service import ProductService
from snackbar.services.sale_service import SaleService


router = APIRouter(prefix="/v1", dependencies=[Depends(authenticate)])

def request_deadline(request: Request) -> Deadline:
    """Bounds sale reads and writes by the configured request timeout."""
    return Deadline(timeout=request.app.state.settings.REQUEST_TIMEOUT_SECONDS)

SessionDep = Annotated[Session, Depends(get_session)]
DeadlineDep = Annotated[Deadline, Depends(request_deadline)]


# --- CATEGORIES (CRUD) ---
@router.post("/categories/", tags=["Catalog - Categories"], status_code=status.HTTP_201_CREATED)
def create_category(data: CategoryDomain, session: SessionDep) -> CategoryDomain:
    """Full CRUD: Persists a single category."""
    return CategoryService(session).create_category(data)

@router.get("/categories/", tags=["Catalog - Categories"])
def get_all_categories(session: SessionDep) -> list[CategoryDomain]:
    """Full CRUD: Retrieves all categories."""
    return CategoryService(session).get_all_categories()

@router.get("/categories/{id}", tags=["Catalog - Categories"])
def get_category(id: UUID, session: SessionDep) -> CategoryDomain:
    """Full CRUD: Retrieves a single category by ID."""
    return CategoryService(session).get_category(id)

@router.put("/categories/{id}", tags=["Catalog - Categories"])
def update_category(id: UUID, data: CategoryDomain, session: SessionDep) -> CategoryDomain:
    """Full CRUD: Updates an existing category."""
    return CategoryService(session).update_category(id, data)

@router.delete("/categories/{id}", tags=["Catalog - Categories"], status_code=status.HTTP_204_NO_CONTENT)
def delete_category(id: UUID, session: SessionDep) -> None:
    """Full CRUD: Removes a category that has no products."""
    CategoryService(session).delete_category(id)


# --- PRODUCTS (CRUD) ---
@router.post("/products/", tags=["Catalog - Products"], status_code=status.HTTP_201_CREATED)
def create_product(data: ProductDomain, session: SessionDep) -> ProductDomain:
    """Full CRUD: Persists a single product under an existing category."""
    return ProductService(session).create_product(data)

@router.get("/products/", tags=["Catalog - Products"])
def get_all_products(session: SessionDep) -> list[ProductDomain]:
    """Full CRUD: Retrieves all products."""
    return ProductService(session).get_all_products()

@router.get("/products/{id}", tags=["Catalog - Products"])
def get_product(id: UUID, session: SessionDep) -> ProductDomain:
    """Full CRUD: Retrieves a single product by ID."""
    return ProductService(session).get_product(id)

@router.put("/products/{id}", tags=["Catalog - Products"])
def update_product(id: UUID, data: ProductDomain, session: SessionDep) -> ProductDomain:
    """Full CRUD: Updates an existing product. Recorded sales keep their prices."""
    return ProductService(session).update_product(id, data)

@router.delete("/products/{id}", tags=["Catalog - Products"], status_code=status.HTTP_204_NO_CONTENT)
def delete_product(id: UUID, session: SessionDep) -> None:
    """Full CRUD: Removes a product from the catalog."""
    ProductService(session).delete_product(id)


# --- ADDITIONS (CRUD) ---
@router.post("/additions/", tags=["Catalog - Additions"], status_code=status.HTTP_201_CREATED)
def create_addition(data: AdditionDomain, session: SessionDep) -> AdditionDomain:
    """Full CRUD: Persists a single add-on."""
    return AdditionService(session).create_addition(data)

@router.get("/additions/", tags=["Catalog - Additions"])
def get_all_additions(session: SessionDep) -> list[AdditionDomain]:
    """Full CRUD: Retrieves all add-ons."""
    return AdditionService(session).get_all_additions()

@router.get("/additions/{id}", tags=["Catalog - Additions"])
def get_addition(id: UUID, session: SessionDep) -> AdditionDomain:
    """Full CRUD: Retrieves a single add-on by ID."""
    return AdditionService(session).get_addition(id)

@router.put("/additions/{id}", tags=["Catalog - Additions"])
def update_addition(id: UUID, data: AdditionDomain, session: SessionDep) -> AdditionDomain:
    """Full CRUD: Updates an existing add-on. Recorded sales keep their snapshots."""
    return AdditionService(session).update_addition(id, data)

@router.delete("/additions/{id}", tags=["Catalog - Additions"], status_code=status.HTTP_204_NO_CONTENT)
def delete_addition(id: UUID, session: SessionDep) -> None:
    """Full CRUD: Removes an add-on from the catalog."""
    AdditionService(session).delete_addition(id)


# --- SALES ---
@router.post("/sales/", tags=["Sales"], status_code=status.HTTP_201_CREATED)
def create_sale(data: SaleDraft, session: SessionDep, deadline: DeadlineDep) -> SaleDomain:
    """Prices the submitted order with current catalog prices and records it.

    - Unit prices and add-on names/prices always come from the catalog.
    - The whole sale is rejected if any product or add-on is unknown or any
      quantity is not positive; nothing is stored in that case.
    """
    return SaleService(session).price_and_create_sale(data, deadline)

@router.get("/sales/", tags=["Sales"])
def get_all_sales(session: SessionDep, deadline: DeadlineDep) -> list[SaleDomain]:
    """Retrieves all sales, most recent first."""
    return SaleService(session).list_sales(deadline)

@router.get("/sales/{id}", tags=["Sales"])
def get_sale(id: UUID, session: SessionDep, deadline: DeadlineDep) -> SaleDomain:
    """Retrieves a single sale with its items and add-on snapshots."""
    return SaleService(session).get_sale(id, deadline)

@router.delete("/sales/{id}", tags=["Sales"], status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(id: UUID, session: SessionDep, deadline: DeadlineDep) -> None:
    """Deletes a sale together with its items."""
    SaleService(session).delete_sale(id, deadline)
