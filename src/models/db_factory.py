"""Process-wide database instance shared by the API, CLI and scheduler."""

import asyncio
from typing import Optional

from loguru import logger

from src.models.database import Database


class DatabaseFactory:
    """
    Singleton holder for the application's Database.

    Example:
        ```python
        db = await DatabaseFactory.ensure_connected()
        repo = AppointmentStatusRepository(db)
        ```
    """

    _instance: Optional[Database] = None
    _async_lock: Optional[asyncio.Lock] = None

    @classmethod
    def _get_async_lock(cls) -> asyncio.Lock:
        # Created lazily so the lock binds to the running loop
        if cls._async_lock is None:
            cls._async_lock = asyncio.Lock()
        return cls._async_lock

    @classmethod
    def get_instance(cls, database_url: Optional[str] = None) -> Database:
        """
        Get the shared Database, creating it on first use.

        Args:
            database_url: PostgreSQL connection URL (only used on first call)

        Returns:
            Database singleton instance
        """
        if cls._instance is None:
            cls._instance = Database(database_url=database_url)
            logger.debug("Created database singleton instance")
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the singleton without closing it (tests only)."""
        cls._instance = None
        cls._async_lock = None

    @classmethod
    async def ensure_connected(cls) -> Database:
        """
        Get the shared Database and make sure its pool is open.

        Returns:
            Connected database instance
        """
        async with cls._get_async_lock():
            db = cls.get_instance()
            if db.pool is None:
                await db.connect()
            return db

    @classmethod
    async def close_instance(cls) -> None:
        """Close and drop the shared Database during shutdown."""
        async with cls._get_async_lock():
            if cls._instance is not None:
                instance_to_close = cls._instance
                cls._instance = None
                await instance_to_close.close()
