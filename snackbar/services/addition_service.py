import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

# Layer 4: Data Access
from snackbar.data_access.models import DbAddition

# Layer 3: Domain Entities
from snackbar.domain import AdditionDomain


logger = logging.getLogger(__name__)

class AdditionService:
    """Service layer for the catalog of paid add-ons.

    Sales keep their own snapshot of every add-on they use, so editing or
    deleting an add-on here leaves recorded sales untouched.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _map_to_domain(self, db_addition: DbAddition) -> AdditionDomain:
        return AdditionDomain.model_validate(db_addition)

    def _get_db_addition_or_404(self, addition_id: UUID) -> DbAddition:
        addition = self.session.get(DbAddition, addition_id)
        if not addition:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Addition with ID {addition_id} not found."
            )
        return addition

    def create_addition(self, addition_in: AdditionDomain) -> AdditionDomain:
        """Full CRUD: Persists a new add-on.

        Args:
            addition_in (AdditionDomain): Input data from the API.

        Returns:
            AdditionDomain: The created add-on.
        """
        new_addition = DbAddition(name=addition_in.name, price=addition_in.price)

        try:
            self.session.add(new_addition)
            self.session.commit()
            self.session.refresh(new_addition)
            return self._map_to_domain(new_addition)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to create addition: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during addition creation."
            )

    def get_all_additions(self) -> list[AdditionDomain]:
        """Full CRUD: Retrieves all add-ons sorted by name."""
        statement = select(DbAddition).order_by(col(DbAddition.name))
        return [self._map_to_domain(a) for a in self.session.exec(statement).all()]

    def get_addition(self, addition_id: UUID) -> AdditionDomain:
        """Full CRUD: Retrieves a single add-on by ID."""
        return self._map_to_domain(self._get_db_addition_or_404(addition_id))

    def update_addition(self, addition_id: UUID, addition_in: AdditionDomain) -> AdditionDomain:
        """Full CRUD: Updates an add-on's name and price.

        Raises:
            HTTPException: 404 status if the add-on does not exist.
        """
        db_addition = self._get_db_addition_or_404(addition_id)
        db_addition.name = addition_in.name
        db_addition.price = addition_in.price

        try:
            self.session.add(db_addition)
            self.session.commit()
            self.session.refresh(db_addition)
            logger.info(f"Addition {addition_id} updated successfully.")
            return self._map_to_domain(db_addition)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to update addition {addition_id}: {e!s}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during addition update."
            )

    def delete_addition(self, addition_id: UUID) -> None:
        """Full CRUD: Removes an add-on from the catalog.

        Raises:
            HTTPException: 404 status if the add-on does not exist.
        """
        db_addition = self._get_db_addition_or_404(addition_id)

        try:
            self.session.delete(db_addition)
            self.session.commit()
            logger.info(f"Addition {addition_id} deleted.")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete addition {addition_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal database error during addition deletion."
            )
