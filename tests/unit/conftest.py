"""Pytest configuration for unit tests - minimal version."""

import os
import sys
from pathlib import Path

# CRITICAL: Set environment variables BEFORE any src imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/therapy_slot_bot_test")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    os.environ.setdefault("ENV", "testing")
