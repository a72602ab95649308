"""Database and connection pool constants."""

from typing import Final


class Database:
    """Database configuration defaults.

    NOTE: These are compile-time defaults only. Runtime configuration
    should be obtained via Settings (src/core/config/settings.py) which
    provides environment variable parsing, validation, and type coercion.
    """

    DEFAULT_URL: Final[str] = "postgresql://localhost:5432/therapy_slot_bot"
    TEST_URL: Final[str] = "postgresql://localhost:5432/therapy_slot_bot_test"
    POOL_SIZE: Final[int] = 10
    CONNECTION_TIMEOUT: Final[float] = 30.0
    QUERY_TIMEOUT: Final[float] = 60.0
    LIST_LIMIT: Final[int] = 500
