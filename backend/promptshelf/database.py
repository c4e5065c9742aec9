"""
PromptShelf Backend: Database Engine Lifecycle
================================================

What:  Async SQLAlchemy engine, session factory and declarative Base.
How:   `Database` is constructed explicitly by the application lifespan,
       connected before the server accepts requests and disposed on shutdown.
       Nothing here opens a connection at import time.
Who:   The lifespan in main.py, PromptStore, the health route and Alembic.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings and apply to
    server databases (PostgreSQL via asyncpg). SQLite URLs use SQLAlchemy's
    default pool for the dialect and skip these options.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from promptshelf.config import Settings
from promptshelf.exceptions import StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `Database.connect()`
    (optional create_all) and Alembic autogenerate.
    """
    pass


class Database:
    """
    Owns the process-wide engine and session factory.

    Lifecycle:
        db = Database(url)          # no I/O
        await db.connect()          # SELECT 1, optional create_all; raises on failure
        ... requests use db.session_factory ...
        await db.dispose()          # closes pooled connections
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        if not url:
            raise StorageError(
                message="DATABASE_URL is not configured",
                context={"setting": "DATABASE_URL"},
            )
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            **self._engine_options(url, pool_size, max_overflow, pool_pre_ping),
        )
        # expire_on_commit=False: records stay readable after the session closes
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    @staticmethod
    def _engine_options(
        url: str, pool_size: int, max_overflow: int, pool_pre_ping: bool
    ) -> Dict[str, Any]:
        if make_url(url).get_backend_name() == "sqlite":
            return {}
        return {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": pool_pre_ping,
            "pool_recycle": 3600,
        }

    async def connect(self, create_schema: bool = False) -> None:
        """
        What:  Verifies connectivity and optionally creates missing tables.
        When:  Once, in the lifespan, before the app starts serving.
        Raises:
            StorageError: the server is unreachable or rejected the credentials.
                          The lifespan lets this propagate so startup aborts.
        """
        # Models must be imported so their tables are registered on Base.metadata
        from promptshelf.models import prompt  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                if create_schema:
                    await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(
                message="Could not connect to the database",
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        logger.info(
            "Database connected (%s)%s",
            describe_url(self.url),
            ", schema ensured" if create_schema else "",
        )

    async def ping(self) -> bool:
        """Returns True when a trivial query succeeds. Used by /health."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Closes all pooled connections. Called from the lifespan on shutdown."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


def describe_url(url: Optional[str]) -> str:
    """Renders a connection URL with the password masked, for logs."""
    if not url:
        return "<unset>"
    return make_url(url).render_as_string(hide_password=True)
