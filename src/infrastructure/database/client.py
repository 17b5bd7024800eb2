import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from src.domain.ledger.errors import ConcurrentModificationError, PersistenceError
from src.infrastructure.database.models import Base

logger = logging.getLogger(__name__)


class DatabaseClient:
    def __init__(
        self,
        db_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
    ):
        self._db_url = db_url.replace("postgresql://", "postgresql+asyncpg://")

        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}
        if not self._db_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=True,
            )

        self._engine = create_async_engine(self._db_url, **engine_kwargs)

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        self._is_initialized = False

    async def init(self, create_schema: bool = True) -> None:
        """
        Open the connection and optionally create every table.

        Call once at server startup.
        """
        if self._is_initialized:
            return

        logger.info("🔌 Initializing database connection...")

        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

            if create_schema:
                logger.info(
                    "🧱 Creating / updating database schema...")
                await conn.run_sync(Base.metadata.create_all)

        self._is_initialized = True
        logger.info("✅ Database client initialized successfully")

    async def close(self) -> None:
        """
        Dispose the engine and release its connections.
        """
        if self._is_initialized:
            await self._engine.dispose()
            self._is_initialized = False
            logger.info("🔌 Database client closed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Read-oriented session. Rolls back if the block raises.
        """
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"❌ Error in DB session, rollback applied: {e}")
                raise PersistenceError(f"Database error: {e}") from e
            except Exception:
                await session.rollback()
                raise

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        One atomic unit of work: commits when the block exits cleanly,
        rolls back every write otherwise.

        Raises:
            ConcurrentModificationError: a versioned row changed under us
            PersistenceError: any other database failure
        """
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except StaleDataError as e:
                logger.warning(f"⚠️ Concurrent modification detected: {e}")
                raise ConcurrentModificationError(
                    "Portfolio was modified concurrently, retry the order"
                ) from e
            except SQLAlchemyError as e:
                logger.error(f"❌ Transaction failed, rollback applied: {e}")
                raise PersistenceError(f"Database error: {e}") from e

    async def health_check(self) -> bool:
        """
        Run SELECT 1 to check connectivity.
        """
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"❌ Database health check failed: {e}")
            return False
