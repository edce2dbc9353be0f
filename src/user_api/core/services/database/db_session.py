"""Shared SQLAlchemy engine plus the session factory built on it."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.user_api.runtime.config.config_data import ConfigData, DatabaseConfig
from src.user_api.runtime.context import get_config


def pool_options(db_config: DatabaseConfig) -> dict[str, Any]:
    """Sizing options for server databases; SQLite pools take none."""
    if db_config.is_sqlite:
        return {}
    return {
        "pool_size": db_config.pool_size,
        "max_overflow": db_config.max_overflow,
        "pool_timeout": db_config.pool_timeout,
        "pool_recycle": db_config.pool_recycle,
        "pool_pre_ping": True,
    }


def driver_options(config: ConfigData) -> dict[str, Any]:
    """``connect_args`` for the configured backend."""
    db_config = config.database
    if db_config.url.startswith("postgresql"):
        return {
            "application_name": f"user_api_{config.app.environment}",
            "connect_timeout": 30,
        }
    if db_config.is_sqlite:
        if config.app.is_production:
            logger.warning("Running on SQLite in production; use PostgreSQL instead")
        # Request sessions may be used from the threadpool
        return {"check_same_thread": False, "timeout": 20}
    return {}


class DbSessionService:
    """Owns the engine for the process and hands out sessions bound to it."""

    def __init__(self, config: ConfigData | None = None):
        config = config or get_config()
        db_config = config.database
        options = pool_options(db_config)

        self._engine = create_engine(
            db_config.connection_string,
            echo=db_config.echo,
            connect_args=driver_options(config),
            **options,
        )
        logger.bind(environment=config.app.environment, **options).info(
            "Database engine ready"
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        # Loaded rows stay readable after the request transaction commits
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session, committing on exit or rolling back on error."""
        with self.get_session() as session:
            try:
                yield session
                session.commit()
            except Exception as e:
                session.rollback()
                logger.bind(error_type=type(e).__name__).error(
                    f"Database transaction failed: {e}"
                )
                raise

    def health_check(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.bind(error_type=type(e).__name__).error(
                f"Database health check failed: {e}"
            )
            return False
        return True

    def dispose(self) -> None:
        self._engine.dispose()
