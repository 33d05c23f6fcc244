import logging
from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Registers the table models on SQLModel.metadata
from snackbar.data_access import models  # noqa: F401


logger = logging.getLogger(__name__)

def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def build_engine(database_url: str) -> Engine:
    """Creates the SQLAlchemy engine for the configured database.

    SQLite gets foreign key enforcement and cross-thread access (FastAPI runs
    sync endpoints in a thread pool); an in-memory SQLite database is pinned
    to a single shared connection so every session sees the same data.

    That shared connection also means concurrent sessions share one
    transaction: a rollback in one undoes the uncommitted writes of the
    others. In-memory databases are for tests and single-client use; use a
    file or server database when requests run concurrently.

    Args:
        database_url (str): SQLAlchemy database URL.

    Returns:
        Engine: The configured engine.
    """
    if not database_url.startswith("sqlite"):
        # pool_pre_ping drops connections the server closed while idle
        return create_engine(database_url, pool_pre_ping=True)

    kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine

def create_db_and_tables(engine: Engine) -> None:
    """Creates the catalog and sale tables if they don't exist."""
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables are ready.")

def get_session(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency to provide a database session."""
    with Session(request.app.state.engine) as session:
        yield session
