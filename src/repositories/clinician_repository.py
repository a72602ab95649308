"""Clinician directory lookups."""

import logging
from typing import List, Optional, Tuple

from src.models.database import Database
from src.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ClinicianRepository(BaseRepository[Tuple[str, str]]):
    """Read-only ``clinician_id -> display name`` lookup."""

    def __init__(self, database: Database):
        super().__init__(database)

    async def get_name(self, clinician_id: str) -> Optional[str]:
        """
        Resolve a clinician's display name.

        Lookup failures are logged and reported as ``None`` so that callers
        recording an appointment never fail because of the directory.

        Args:
            clinician_id: Identifier taken from the booking URL

        Returns:
            Display name, or None if the id is empty, unknown or the lookup failed
        """
        if not clinician_id:
            return None

        try:
            async with self.db.get_connection() as conn:
                name = await conn.fetchval(
                    "SELECT name FROM clinicians WHERE clinician_id = $1",
                    clinician_id,
                )
        except Exception as e:
            logger.warning(f"Clinician lookup failed for {clinician_id}: {e}")
            return None

        return name or None

    async def list_all(self, limit: int = 100) -> List[Tuple[str, str]]:
        """
        List known clinicians.

        Args:
            limit: Maximum number of clinicians to return

        Returns:
            List of (clinician_id, name) pairs ordered by name
        """
        async with self.db.get_connection() as conn:
            rows = await conn.fetch(
                "SELECT clinician_id, name FROM clinicians ORDER BY name LIMIT $1",
                limit,
            )
            return [(row["clinician_id"], row["name"]) for row in rows]
