"""Utility functions module."""

from .selectors import SelectorManager, get_selector_manager

__all__ = [
    "SelectorManager",
    "get_selector_manager",
]
