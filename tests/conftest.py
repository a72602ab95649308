"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# CRITICAL: Set environment variables BEFORE any src imports
# pydantic-settings reads them when the settings singleton is first built.
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/therapy_slot_bot_test")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import Any, Callable, Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock

# NOW it's safe to import from src
import pytest

from src.core.enums import BookingStatus
from src.models.schemas import AppointmentRecord, PatientInfo
from src.services.booking.page_inspector import PageInspector
from src.utils.selectors import SelectorManager

PROJECT_ROOT = Path(__file__).parent.parent
SELECTORS_FILE = PROJECT_ROOT / "config" / "selectors.yaml"

TEST_HREF = "https://portal.example.com/Appointments/Request?clinician=42&slot=9001"


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost:5432/therapy_slot_bot_test")
    monkeypatch.setenv("SELECTORS_FILE", str(SELECTORS_FILE))

    # Reset singletons so each test gets fresh settings
    from src.core.config.settings import reset_settings
    from src.utils.selectors import reset_selector_manager

    reset_settings()
    reset_selector_manager()
    yield
    reset_settings()
    reset_selector_manager()


class FakePage(PageInspector):
    """
    In-memory PageInspector.

    ``present`` holds the selectors that resolve, ``texts`` maps container
    selectors to their inner texts, and ``on_click`` maps a selector to a
    callback run after it is clicked (to simulate page transitions).
    """

    def __init__(
        self,
        present: Iterable[str] = (),
        texts: Optional[Dict[str, List[str]]] = None,
        body: str = "",
        goto_ok: bool = True,
        on_click: Optional[Dict[str, Callable[["FakePage"], None]]] = None,
        failing_fills: Iterable[str] = (),
    ):
        self.present = set(present)
        self.texts: Dict[str, List[str]] = dict(texts or {})
        self.body = body
        self.goto_ok = goto_ok
        self.on_click = dict(on_click or {})
        self.failing_fills = set(failing_fills)
        self.visited: List[str] = []
        self.clicks: List[str] = []
        self.fills: Dict[str, str] = {}

    async def goto(self, url, wait_until="networkidle", timeout=None):
        self.visited.append(url)
        return self.goto_ok

    async def is_present(self, selector, timeout=0, state="visible"):
        return selector in self.present

    async def click(self, selector, timeout=0):
        if selector not in self.present:
            raise RuntimeError(f"element not found: {selector}")
        self.clicks.append(selector)
        callback = self.on_click.get(selector)
        if callback is not None:
            callback(self)

    async def fill(self, selector, value, timeout=0):
        if selector in self.failing_fills:
            raise RuntimeError(f"cannot fill {selector}")
        self.fills[selector] = value

    async def inner_texts(self, selector):
        return list(self.texts.get(selector, []))

    async def body_text(self):
        return self.body

    async def wait_for_network_idle(self, timeout):
        return True


class FakeSessionFactory:
    """Session factory yielding a prepared FakePage and counting sessions."""

    def __init__(self, page: Optional[FakePage] = None, error: Optional[Exception] = None):
        self.page = page or FakePage()
        self.error = error
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def __call__(self):
        self.opened += 1
        if self.error is not None:
            raise self.error
        try:
            yield self.page
        finally:
            self.closed += 1


@pytest.fixture
def fake_page_cls():
    """The FakePage class, for tests that build pages with custom state."""
    return FakePage


@pytest.fixture
def fake_session_cls():
    """The FakeSessionFactory class."""
    return FakeSessionFactory


@pytest.fixture
def selectors() -> SelectorManager:
    """Selector manager loaded from the shipped configuration."""
    return SelectorManager(str(SELECTORS_FILE))


@pytest.fixture
def test_href() -> str:
    """A booking URL carrying a clinician id."""
    return TEST_HREF


@pytest.fixture
def patient() -> PatientInfo:
    """Typical patient submitted through the guest form."""
    return PatientInfo(
        first_name="Jane",
        last_name="Doe",
        date_of_birth="01/02/1990",
        phone="5551234567",
        email="jane.doe@example.com",
        comments="Prefers afternoons",
        appointment_type="Initial consultation",
        previous_therapy="no",
    )


def make_record(
    href: str = TEST_HREF, status: BookingStatus = BookingStatus.UNKNOWN, **fields: Any
) -> AppointmentRecord:
    """Build an AppointmentRecord with sensible defaults."""
    data: Dict[str, Any] = {
        "id": 1,
        "href": href,
        "clinician_id": "42",
        "status": status,
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@example.com",
    }
    data.update(fields)
    return AppointmentRecord(**data)


@pytest.fixture
def record_factory():
    """Factory for AppointmentRecord instances."""
    return make_record


@pytest.fixture
def mock_store():
    """Mock AppointmentStatusRepository with an empty store."""

    async def upsert(href, patient, status=BookingStatus.UNKNOWN, message=None):
        return make_record(href=href, status=status)

    store = MagicMock()
    store.find = AsyncMock(return_value=None)
    store.upsert = AsyncMock(side_effect=upsert)
    store.find_all_by_status = AsyncMock(return_value=[])
    store.list_all = AsyncMock(return_value=[])
    store.mark_attempt = AsyncMock()
    return store


@pytest.fixture
def mock_db():
    """Mock Database whose get_connection yields ``mock_db.conn``."""
    conn = AsyncMock()
    db = MagicMock()

    @asynccontextmanager
    async def get_connection(timeout=None):
        yield conn

    db.get_connection = get_connection
    db.conn = conn
    return db
