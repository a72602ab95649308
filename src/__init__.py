"""Therapy Slot Bot - Automated therapy appointment booking."""

import importlib as _importlib
from typing import TYPE_CHECKING, Any

__version__ = "1.0.0"
__license__ = "MIT"

if TYPE_CHECKING:
    from .core.config.settings import get_settings as get_settings
    from .core.logger import setup_structured_logging as setup_structured_logging
    from .models.database import Database as Database
    from .services.booking.availability_checker import (
        AvailabilityChecker as AvailabilityChecker,
    )
    from .services.booking.form_submitter import FormSubmitter as FormSubmitter
    from .services.booking.reconciliation_processor import (
        ReconciliationProcessor as ReconciliationProcessor,
    )

# Explicit lazy-loading map: name -> (module_path, attribute_name)
_LAZY_MODULE_MAP = {
    # Core
    "get_settings": ("src.core.config.settings", "get_settings"),
    "setup_structured_logging": ("src.core.logger", "setup_structured_logging"),
    # Models
    "Database": ("src.models.database", "Database"),
    # Services
    "AvailabilityChecker": ("src.services.booking.availability_checker", "AvailabilityChecker"),
    "FormSubmitter": ("src.services.booking.form_submitter", "FormSubmitter"),
    "ReconciliationProcessor": (
        "src.services.booking.reconciliation_processor",
        "ReconciliationProcessor",
    ),
}

# Auto-derive __all__ from _LAZY_MODULE_MAP to prevent manual sync issues
__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str) -> Any:
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        # Cache in module globals to avoid repeated imports
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
