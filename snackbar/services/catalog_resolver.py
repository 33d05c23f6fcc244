import logging
from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from snackbar.core.errors import StorageFailure

# Layer 4: Data Access
from snackbar.data_access.models import DbAddition, DbProduct

# Layer 3: Domain Entities
from snackbar.domain import AdditionDomain, ProductDomain


logger = logging.getLogger(__name__)

class CatalogResolver(Protocol):
    """Read-only view of the catalog used while pricing a sale.

    Implementations return None when the entry does not exist and raise
    StorageFailure when the lookup itself failed.
    """

    def resolve_product(self, product_id: UUID) -> Optional[ProductDomain]: ...

    def resolve_addition(self, addition_id: UUID) -> Optional[AdditionDomain]: ...


class SqlCatalogResolver:
    """Resolves catalog snapshots from the catalog tables of the current session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve_product(self, product_id: UUID) -> Optional[ProductDomain]:
        """Returns the current product snapshot, or None if it does not exist.

        Raises:
            StorageFailure: If the database could not be queried.
        """
        try:
            db_product = self.session.get(DbProduct, product_id)
        except SQLAlchemyError as e:
            logger.error(f"Product lookup {product_id} failed: {e!s}")
            raise StorageFailure(f"Product lookup {product_id} failed.") from e
        return ProductDomain.model_validate(db_product) if db_product else None

    def resolve_addition(self, addition_id: UUID) -> Optional[AdditionDomain]:
        """Returns the current add-on snapshot, or None if it does not exist.

        Raises:
            StorageFailure: If the database could not be queried.
        """
        try:
            db_addition = self.session.get(DbAddition, addition_id)
        except SQLAlchemyError as e:
            logger.error(f"Addition lookup {addition_id} failed: {e!s}")
            raise StorageFailure(f"Addition lookup {addition_id} failed.") from e
        return AdditionDomain.model_validate(db_addition) if db_addition else None
