"""PostgreSQL connection and utilities."""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from catalog.config import (
    DATABASE_URL,
    DB_CONNECT_TIMEOUT,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DB_STATEMENT_TIMEOUT_MS,
)
from catalog.db.postgres_bootstrap import Base
from catalog.errors import CatalogError, ConflictError, InternalError, ServiceUnavailableError
from catalog.models import *  # Needed for Base metadata

logger = logging.getLogger(__name__)


class PostgresConnection:
    def __init__(self, url: str = DATABASE_URL, **engine_options):
        self.url = url
        self.engine_options = engine_options
        self._engine = None
        self._session_factory = None

    def configure(self, url: str, **engine_options):
        """Point the connection at another database, dropping the current engine."""
        if self._engine is not None:
            self._engine.dispose()
        self.url = url
        self.engine_options = engine_options
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        if not self._engine:
            options = dict(self.engine_options)
            if self.url.startswith("postgresql"):
                # Bound every statement so a stalled server cannot pin request handlers
                options.setdefault(
                    "connect_args",
                    {
                        "connect_timeout": DB_CONNECT_TIMEOUT,
                        "options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}",
                    },
                )
                options.setdefault("pool_size", DB_POOL_SIZE)
                options.setdefault("pool_timeout", DB_POOL_TIMEOUT)
                options.setdefault("pool_pre_ping", True)
            self._engine = create_engine(self.url, **options)
        return self._engine

    @property
    def session_factory(self):
        if not self._session_factory:
            self._session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        return self._session_factory

    @contextmanager
    def session_scope(self, action: str = "process request"):
        """Run a unit of work in one transaction.

        Commits on success, rolls back on any error. Store errors that are not
        already domain errors are translated so callers only ever see
        :class:`CatalogError` subclasses.
        """
        session: Session = self.session_factory()
        try:
            yield session
            session.commit()
        except CatalogError:
            session.rollback()
            raise
        except IntegrityError as e:
            session.rollback()
            logger.warning(f"Integrity violation while trying to {action}: {e.orig}")
            raise ConflictError(f"Failed to {action}: conflicts with an existing record") from e
        except (OperationalError, PoolTimeoutError) as e:
            session.rollback()
            logger.error(f"Store unavailable while trying to {action}: {e}")
            raise ServiceUnavailableError() from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception(f"Store error while trying to {action}")
            raise InternalError(f"Failed to {action}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def create_tables(self):
        """Create all tables in the database."""
        logger.log(logging.INFO, "Creating tables...")

        try:
            Base.metadata.create_all(self.engine)
            logger.log(logging.INFO, "Tables created successfully.")
        except Exception as e:
            logger.log(logging.ERROR, f"Error creating tables: {e}")
            raise e

    def drop_tables(self):
        Base.metadata.drop_all(self.engine)


# Singleton instance
db = PostgresConnection()
