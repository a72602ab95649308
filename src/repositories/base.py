"""Base repository class."""

from abc import ABC, abstractmethod
from typing import Generic, List, TypeVar

from src.models.database import Database

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Base repository holding the shared database handle."""

    def __init__(self, database: Database):
        """
        Initialize repository with database connection.

        Args:
            database: Database instance
        """
        self.db = database

    @abstractmethod
    async def list_all(self, limit: int = 100) -> List[T]:
        """
        Get all entities.

        Args:
            limit: Maximum number of entities to return

        Returns:
            List of entities
        """
        pass
