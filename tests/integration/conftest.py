"""Shared fixtures for integration tests requiring a real PostgreSQL."""

import importlib.util
import io
import logging
import os
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from alembic.migration import MigrationContext
from alembic.operations import Operations

from src.constants import Database as DatabaseConfig
from src.models.database import Database
from src.repositories.appointment_status_repository import AppointmentStatusRepository
from src.repositories.clinician_repository import ClinicianRepository

logger = logging.getLogger(__name__)

# Captured at import time; the autouse environment fixture rewrites DATABASE_URL per test
TEST_DATABASE_URL = (
    os.getenv("TEST_DATABASE_URL") or os.getenv("DATABASE_URL") or DatabaseConfig.TEST_URL
)

BASELINE_MIGRATION = (
    Path(__file__).resolve().parents[2] / "alembic" / "versions" / "001_baseline.py"
)


def _skip_integration(items, reason: str) -> None:
    skip_integration = pytest.mark.skip(reason=reason)
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_collection_modifyitems(config, items):
    """
    Automatically skip integration tests if database is unavailable.

    This prevents test failures in environments without PostgreSQL.
    """
    if not any("integration" in item.keywords for item in items):
        return

    try:
        import asyncio

        import asyncpg

        async def check_db():
            try:
                conn = await asyncio.wait_for(asyncpg.connect(TEST_DATABASE_URL), timeout=5.0)
                await conn.close()
                return True
            except Exception as e:
                logger.warning(f"Database connection failed: {e}")
                return False

        if not asyncio.run(check_db()):
            _skip_integration(
                items, "PostgreSQL database is not available - skipping integration tests"
            )
    except Exception as e:
        logger.error(f"Error checking database availability: {e}")
        _skip_integration(items, f"Cannot verify database availability: {e}")


def render_baseline_sql() -> str:
    """Render the baseline migration as a PostgreSQL script (alembic offline mode)."""
    spec = importlib.util.spec_from_file_location("baseline_migration", BASELINE_MIGRATION)
    migration = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(migration)

    buffer = io.StringIO()
    context = MigrationContext.configure(
        dialect_name="postgresql", opts={"as_sql": True, "output_buffer": buffer}
    )
    with Operations.context(context):
        migration.upgrade()
    return buffer.getvalue()


@pytest_asyncio.fixture
async def test_db() -> AsyncGenerator[Database, None]:
    """
    Provide a real database with a freshly created schema.

    Tables are dropped and rebuilt from the baseline migration before each
    test and dropped again afterwards.

    Yields:
        Database instance connected to test database
    """
    db = Database(database_url=TEST_DATABASE_URL, pool_size=2, require_migrations=False)
    await db.connect()

    async with db.get_connection() as conn:
        await conn.execute("DROP TABLE IF EXISTS appointment_statuses, clinicians CASCADE")
        await conn.execute(render_baseline_sql())

    try:
        yield db
    finally:
        try:
            async with db.get_connection() as conn:
                await conn.execute(
                    "DROP TABLE IF EXISTS appointment_statuses, clinicians CASCADE"
                )
                logger.info("Test database tables dropped successfully")
        except Exception as e:
            logger.warning(f"Failed to drop test tables: {e}")

        await db.close()


@pytest_asyncio.fixture
async def clinician_repo(test_db: Database) -> ClinicianRepository:
    """Provide a ClinicianRepository connected to the test database."""
    return ClinicianRepository(test_db)


@pytest_asyncio.fixture
async def status_store(
    test_db: Database, clinician_repo: ClinicianRepository
) -> AppointmentStatusRepository:
    """Provide the appointment status store connected to the test database."""
    return AppointmentStatusRepository(test_db, clinician_repo)
