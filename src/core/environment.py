"""Environment detection shared by logging and settings."""

import os
from typing import FrozenSet


class Environment:
    """Resolve the running environment from the ``ENV`` variable."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    TESTING = "testing"

    VALID: FrozenSet[str] = frozenset({PRODUCTION, STAGING, DEVELOPMENT, TESTING})

    # Environments where verbose diagnostics (loguru diagnose) are acceptable
    _DEV_MODE: FrozenSet[str] = frozenset({DEVELOPMENT, TESTING})

    @classmethod
    def current(cls) -> str:
        """Get the current environment name, validated and lowercased.

        Returns:
            Validated environment name. Defaults to 'production' for unknown values.
        """
        env = os.getenv("ENV", cls.PRODUCTION).lower()
        if env not in cls.VALID:
            return cls.PRODUCTION
        return env

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production."""
        return cls.current() == cls.PRODUCTION

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in a development or test environment."""
        return cls.current() in cls._DEV_MODE
