import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

# Layer 4: Data Access
from snackbar.data_access.models import DbCategory, DbProduct

# Layer 3: Domain Entities
from snackbar.domain import CategoryDomain


logger = logging.getLogger(__name__)

class CategoryService:
    """
    Service layer for managing Category business logic.

    This service orchestrates the transformation between CategoryDomain entities
    and DbCategory data access models.
    """

    def __init__(self, session: Session) -> None:
        """
        Initializes the CategoryService with a database session.

        Args:
            session (Session): The SQLModel/SQLAlchemy session for database operations.
        """
        self.session = session

    def _map_to_domain(self, db_category: DbCategory) -> CategoryDomain:
        return CategoryDomain.model_validate(db_category)

    def _get_db_category_or_404(self, category_id: UUID) -> DbCategory:
        """
        Internal helper to retrieve a category or raise a 404 error.

        Args:
            category_id (UUID): The primary key ID of the category.

        Returns:
            DbCategory: The retrieved database model instance.

        Raises:
            HTTPException: 404 status if the category does not exist in the database.
        """
        category = self.session.get(DbCategory, category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Category with ID {category_id} not found."
            )
        return category

    def create_category(self, category_in: CategoryDomain) -> CategoryDomain:
        """
        Persists a new Category to the database.

        Args:
            category_in (CategoryDomain): The Pydantic domain model containing input data.

        Returns:
            CategoryDomain: The newly created category.
        """
        new_category = DbCategory(
            name=category_in.name,
            description=category_in.description
        )

        try:
            self.session.add(new_category)
            self.session.commit()
            self.session.refresh(new_category)
            return self._map_to_domain(new_category)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to create category: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during category creation."
            )

    def get_all_categories(self) -> list[CategoryDomain]:
        """
        Retrieves all categories sorted by name.

        Returns:
            list[CategoryDomain]: A list of all categories.
        """
        statement = select(DbCategory).order_by(col(DbCategory.name))
        return [self._map_to_domain(c) for c in self.session.exec(statement).all()]

    def get_category(self, category_id: UUID) -> CategoryDomain:
        """
        Retrieves a specific category by its unique identifier.

        Raises:
            HTTPException: 404 status via the internal helper if not found.
        """
        return self._map_to_domain(self._get_db_category_or_404(category_id))

    def update_category(self, category_id: UUID, category_in: CategoryDomain) -> CategoryDomain:
        """
        Updates an existing category's details in the database.

        Args:
            category_id (UUID): The ID of the category to be updated.
            category_in (CategoryDomain): The updated domain data.

        Returns:
            CategoryDomain: The updated category.

        Raises:
            HTTPException: 404 status if the target category does not exist.
        """
        db_category = self._get_db_category_or_404(category_id)

        db_category.name = category_in.name
        db_category.description = category_in.description

        try:
            self.session.add(db_category)
            self.session.commit()
            self.session.refresh(db_category)
            logger.info(f"Category {category_id} updated successfully.")
            return self._map_to_domain(db_category)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to update category {category_id}: {e!s}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during category update."
            )

    def delete_category(self, category_id: UUID) -> None:
        """
        Deletes a category that no product refers to.

        Args:
            category_id (UUID): The ID of the category to delete.

        Raises:
            HTTPException: 404 status if the category does not exist.
            HTTPException: 400 status if products still belong to the category.
        """
        db_category = self._get_db_category_or_404(category_id)

        statement = select(DbProduct).where(DbProduct.category_id == category_id)
        if self.session.exec(statement).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Category {category_id} still has products."
            )

        try:
            self.session.delete(db_category)
            self.session.commit()
            logger.info(f"Category {category_id} deleted.")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete category {category_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during category deletion."
            )
