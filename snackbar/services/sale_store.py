import logging
from datetime import UTC
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from snackbar.core.deadline import Deadline, ensure_deadline
from snackbar.core.errors import OperationCancelled, SaleNotFound, StorageFailure

# Layer 4: Data Access
from snackbar.data_access.models import DbSale, DbSaleItem, DbSaleItemAddition

# Layer 3: Domain Entities
from snackbar.domain import NIL_ID, AdditionSnapshot, SaleDomain, SaleItemDomain


logger = logging.getLogger(__name__)

class SaleStore:
    """Transactional persistence of the sale aggregate.

    A sale is stored as three record sets: the header (`sale`), one row per
    line (`sale_item`) and one row per add-on attached to a line
    (`sale_item_addition`). Writes are all-or-nothing: any failure rolls the
    whole transaction back before the error reaches the caller.

    Every method takes an optional Deadline, checked between statements and
    before commit.
    """

    def __init__(self, session: Session) -> None:
        """Initializes the store with a database session.

        Args:
            session (Session): The active SQLModel/SQLAlchemy session.
        """
        self.session = session

    # --- 1. WRITE PATH ---

    def create(self, sale: SaleDomain, deadline: Optional[Deadline] = None) -> SaleDomain:
        """Writes a priced sale, its items and their add-on links in one transaction.

        Args:
            sale (SaleDomain): The priced aggregate. Its id is kept unless absent or nil.
            deadline (Optional[Deadline]): Bound on the whole write.

        Returns:
            SaleDomain: The stored sale with sale_id and item_id assigned.

        Raises:
            OperationCancelled: If the deadline expired; nothing was committed.
            StorageFailure: If any statement or the commit failed; nothing was committed.
        """
        deadline = ensure_deadline(deadline)
        sale_id = sale.id if sale.id not in (None, NIL_ID) else uuid4()

        try:
            # 1. Header
            deadline.check("writing the sale header")
            self.session.add(DbSale(
                id=sale_id,
                date=sale.date.astimezone(UTC),
                total_amount=sale.total_amount,
                discount=sale.discount,
                additional_charges=sale.additional_charges,
            ))
            self.session.flush()

            # 2. Items, numbered in submission order
            deadline.check("writing the sale items")
            self.session.add_all([
                DbSaleItem(
                    sale_id=sale_id,
                    item_id=item_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                )
                for item_id, item in enumerate(sale.items, start=1)
            ])
            self.session.flush()

            # 3. Add-on links, one batch per item
            for item_id, item in enumerate(sale.items, start=1):
                if not item.additions:
                    continue
                deadline.check(f"writing the add-ons of item {item_id}")
                self.session.add_all([
                    DbSaleItemAddition(
                        sale_id=sale_id,
                        item_id=item_id,
                        position=position,
                        addition_id=addition.id,
                        name=addition.name,
                        price=addition.price,
                    )
                    for position, addition in enumerate(item.additions, start=1)
                ])
                self.session.flush()

            deadline.check("commit")
            self.session.commit()
        except OperationCancelled as e:
            self.session.rollback()
            logger.warning(f"Sale {sale_id} was not created: {e}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to create sale {sale_id}: {e!s}")
            raise StorageFailure("Internal database error during sale creation.") from e

        logger.info(f"Sale {sale_id} created with {len(sale.items)} item(s).")
        return sale.model_copy(update={
            "id": sale_id,
            "items": [
                item.model_copy(update={"sale_id": sale_id, "item_id": item_id})
                for item_id, item in enumerate(sale.items, start=1)
            ],
        })

    def delete(self, sale_id: UUID, deadline: Optional[Deadline] = None) -> None:
        """Removes a sale with its add-on links and items in one transaction.

        Rows are removed links first, then items, then the header. If no
        header row was removed the transaction is rolled back.

        Args:
            sale_id (UUID): The sale to delete.
            deadline (Optional[Deadline]): Bound on the whole delete.

        Raises:
            SaleNotFound: If there is no such sale; no rows were changed.
            OperationCancelled: If the deadline expired; no rows were changed.
            StorageFailure: If a statement or the commit failed; no rows were changed.
        """
        deadline = ensure_deadline(deadline)

        try:
            deadline.check("deleting the add-on links")
            self.session.execute(
                delete(DbSaleItemAddition).where(col(DbSaleItemAddition.sale_id) == sale_id)
            )
            deadline.check("deleting the sale items")
            self.session.execute(
                delete(DbSaleItem).where(col(DbSaleItem.sale_id) == sale_id)
            )
            deadline.check("deleting the sale header")
            result = self.session.execute(delete(DbSale).where(col(DbSale.id) == sale_id))

            if result.rowcount == 0:
                self.session.rollback()
                raise SaleNotFound(sale_id)

            deadline.check("commit")
            self.session.commit()
        except OperationCancelled as e:
            self.session.rollback()
            logger.warning(f"Sale {sale_id} was not deleted: {e}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete sale {sale_id}: {e!s}")
            raise StorageFailure("Internal database error during sale deletion.") from e

        logger.info(f"Sale {sale_id} deleted.")

    # --- 2. READ PATH ---

    def _load_items(self, sale_id: UUID, deadline: Deadline) -> list[SaleItemDomain]:
        """Rebuilds the ordered items of one sale, each with its add-on snapshots."""
        statement = (
            select(DbSaleItem)
            .where(DbSaleItem.sale_id == sale_id)
            .order_by(col(DbSaleItem.item_id))
        )
        items = []
        for db_item in self.session.exec(statement).all():
            deadline.check(f"loading the add-ons of item {db_item.item_id}")
            links = self.session.exec(
                select(DbSaleItemAddition)
                .where(
                    DbSaleItemAddition.sale_id == sale_id,
                    DbSaleItemAddition.item_id == db_item.item_id,
                )
                .order_by(col(DbSaleItemAddition.position))
            ).all()
            items.append(SaleItemDomain(
                sale_id=db_item.sale_id,
                item_id=db_item.item_id,
                product_id=db_item.product_id,
                quantity=db_item.quantity,
                unit_price=db_item.unit_price,
                total_price=db_item.total_price,
                additions=[
                    AdditionSnapshot(id=link.addition_id, name=link.name, price=link.price)
                    for link in links
                ],
            ))
        return items

    def _map_to_domain(self, db_sale: DbSale, deadline: Deadline) -> SaleDomain:
        return SaleDomain(
            id=db_sale.id,
            date=db_sale.date,
            total_amount=db_sale.total_amount,
            discount=db_sale.discount,
            additional_charges=db_sale.additional_charges,
            items=self._load_items(db_sale.id, deadline),
        )

    def get_by_id(self, sale_id: UUID, deadline: Optional[Deadline] = None) -> Optional[SaleDomain]:
        """Reads one sale back into the aggregate.

        Args:
            sale_id (UUID): The sale to read.
            deadline (Optional[Deadline]): Bound on the whole read.

        Returns:
            Optional[SaleDomain]: The reconstructed sale, or None if there is no such sale.

        Raises:
            OperationCancelled: If the deadline expired mid-read.
            StorageFailure: If the database could not be queried.
        """
        deadline = ensure_deadline(deadline)
        try:
            deadline.check("loading the sale header")
            db_sale = self.session.get(DbSale, sale_id)
            if db_sale is None:
                return None
            return self._map_to_domain(db_sale, deadline)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to read sale {sale_id}: {e!s}")
            raise StorageFailure("Internal database error while reading the sale.") from e

    def list(self, deadline: Optional[Deadline] = None) -> list[SaleDomain]:
        """Reads every sale, most recent first.

        Returns:
            list[SaleDomain]: All sales ordered by date descending.

        Raises:
            OperationCancelled: If the deadline expired mid-read.
            StorageFailure: If the database could not be queried.
        """
        deadline = ensure_deadline(deadline)
        try:
            deadline.check("loading the sales")
            statement = select(DbSale).order_by(col(DbSale.date).desc())
            return [self._map_to_domain(s, deadline) for s in self.session.exec(statement).all()]
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to list sales: {e!s}")
            raise StorageFailure("Internal database error while listing sales.") from e
