import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

# Layer 4: Data Access
from snackbar.data_access.models import DbCategory, DbProduct

# Layer 3: Domain Entities
from snackbar.domain import ProductDomain


logger = logging.getLogger(__name__)

class ProductService:
    """
    Service layer for managing Product business logic and data orchestration.

    Products must reference an existing category. Price changes made here
    never touch sales already recorded, which keep their own unit prices.
    """

    def __init__(self, session: Session) -> None:
        """
        Initializes the ProductService with a database session.

        Args:
            session (Session): The active SQLModel/SQLAlchemy session.
        """
        self.session = session

    # --- 1. LAYERED MAPPING HELPERS ---

    def _map_to_domain(self, db_product: DbProduct) -> ProductDomain:
        """
        Converts a Data Access entity (SQLModel) into a Domain entity (Pydantic).

        Args:
            db_product (DbProduct): The database record to be transformed.

        Returns:
            ProductDomain: The clean business representation of the product.
        """
        return ProductDomain.model_validate(db_product)

    def _get_db_product_or_404(self, product_id: UUID) -> DbProduct:
        product = self.session.get(DbProduct, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product with ID {product_id} not found."
            )
        return product

    # --- 2. BUSINESS VALIDATIONS ---

    def validate_category(self, category_id: UUID) -> None:
        """
        Enforces that the product's category exists.

        Args:
            category_id (UUID): The referenced category.

        Raises:
            HTTPException: 400 status if the category does not exist.
        """
        if not self.session.get(DbCategory, category_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Category with ID {category_id} does not exist."
            )

    # --- 3. FULL CRUD OPERATIONS ---

    def create_product(self, product_in: ProductDomain) -> ProductDomain:
        """
        Persists a new product.

        Args:
            product_in (ProductDomain): The validated domain data from the API.

        Returns:
            ProductDomain: The newly created product as a domain entity.

        Raises:
            HTTPException: 400 status if the category does not exist.
        """
        self.validate_category(product_in.category_id)

        new_product = DbProduct(
            name=product_in.name,
            price=product_in.price,
            description=product_in.description,
            category_id=product_in.category_id
        )

        try:
            self.session.add(new_product)
            self.session.commit()
            self.session.refresh(new_product)
            return self._map_to_domain(new_product)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to create product: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during product creation."
            )

    def get_all_products(self) -> list[ProductDomain]:
        """
        Retrieves all products sorted by name.

        Returns:
            list[ProductDomain]: A list of all products formatted as domain entities.
        """
        statement = select(DbProduct).order_by(col(DbProduct.name))
        return [self._map_to_domain(p) for p in self.session.exec(statement).all()]

    def get_product(self, product_id: UUID) -> ProductDomain:
        """
        Retrieves a single product by its primary key.

        Raises:
            HTTPException: 404 if the product is not found.
        """
        return self._map_to_domain(self._get_db_product_or_404(product_id))

    def update_product(self, product_id: UUID, product_in: ProductDomain) -> ProductDomain:
        """
        Updates an existing product's name, price, description and category.

        Args:
            product_id (UUID): The ID of the product to update.
            product_in (ProductDomain): The new data to be applied.

        Returns:
            ProductDomain: The updated product as a domain model.

        Raises:
            HTTPException: 404 if the target product does not exist.
            HTTPException: 400 if the new category does not exist.
        """
        db_product = self._get_db_product_or_404(product_id)
        self.validate_category(product_in.category_id)

        db_product.name = product_in.name
        db_product.price = product_in.price
        db_product.description = product_in.description
        db_product.category_id = product_in.category_id

        try:
            self.session.add(db_product)
            self.session.commit()
            self.session.refresh(db_product)
            logger.info(f"Product {product_id} updated successfully.")
            return self._map_to_domain(db_product)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to update product {product_id}: {e!s}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during product update."
            )

    def delete_product(self, product_id: UUID) -> None:
        """
        Removes a product from the catalog. Recorded sales are not affected.

        Raises:
            HTTPException: 404 if the product does not exist.
        """
        db_product = self._get_db_product_or_404(product_id)

        try:
            self.session.delete(db_product)
            self.session.commit()
            logger.info(f"Product {product_id} deleted.")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete product {product_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during product deletion."
            )
