# fleet_records/database.py
"""
Record store handle, session management, and the transaction guard.

A RecordStore owns the engine and session factory. It is created once on
startup, attached to the FastAPI app state, and disposed on shutdown. Services
never open their own connections: they receive a Session from the caller.
"""

import os
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fleet_records.errors import ConstraintViolation, StorageFailure
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class RecordStore:
    """Engine + session factory for one database URL."""

    def __init__(self, database_url: str, echo: bool = False):
        url = make_url(database_url)
        self.is_sqlite = url.get_backend_name() == "sqlite"

        if self.is_sqlite:
            if url.database and url.database != ":memory:":
                os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
            self.engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                database_url,
                pool_pre_ping=True,          # Auto-reconnect if DB connection drops
                pool_size=10,
                max_overflow=20,
                echo=echo,
            )

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self):
        """
        Creates all DB tables. Safe to call multiple times.
        Import all models here so SQLAlchemy knows about them.
        """
        import fleet_records.models  # noqa

        Base.metadata.create_all(bind=self.engine)

    def table_names(self) -> list[str]:
        return sorted(inspect(self.engine).get_table_names())

    def session(self) -> Session:
        return self.SessionLocal()

    def close(self):
        self.engine.dispose()


def get_db(request: Request):
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Commit everything done inside the block, or roll all of it back.
    Store errors are translated to ConstraintViolation / StorageFailure.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[STORE] Constraint violation: {e.orig}")
        raise ConstraintViolation(str(e.orig)) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[STORE] Transaction failed: {e}")
        raise StorageFailure(str(e)) from e
    except Exception:
        db.rollback()
        raise
