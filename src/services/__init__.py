"""Business logic services module."""

import importlib as _importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .booking import AvailabilityChecker as AvailabilityChecker
    from .booking import FormSubmitter as FormSubmitter
    from .booking import ReconciliationProcessor as ReconciliationProcessor
    from .booking.service_context import BookingServiceFactory as BookingServiceFactory
    from .bot import BrowserManager as BrowserManager

_LAZY_MODULE_MAP = {
    "AvailabilityChecker": ("src.services.booking", "AvailabilityChecker"),
    "FormSubmitter": ("src.services.booking", "FormSubmitter"),
    "ReconciliationProcessor": ("src.services.booking", "ReconciliationProcessor"),
    "BookingServiceFactory": ("src.services.booking.service_context", "BookingServiceFactory"),
    "BrowserManager": ("src.services.bot", "BrowserManager"),
}

__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str):
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
