"""Database models module."""

import importlib as _importlib
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .database import Database as Database
    from .db_factory import DatabaseFactory as DatabaseFactory
    from .schemas import AppointmentRecord as AppointmentRecord
    from .schemas import PatientInfo as PatientInfo
    from .schemas import ProcessingLogEntry as ProcessingLogEntry

# Explicit lazy-loading map: name -> (module_path, attribute_name)
_LAZY_MODULE_MAP = {
    "Database": ("src.models.database", "Database"),
    "DatabaseFactory": ("src.models.db_factory", "DatabaseFactory"),
    "AppointmentRecord": ("src.models.schemas", "AppointmentRecord"),
    "PatientInfo": ("src.models.schemas", "PatientInfo"),
    "ProcessingLogEntry": ("src.models.schemas", "ProcessingLogEntry"),
}

__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str) -> Any:
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
