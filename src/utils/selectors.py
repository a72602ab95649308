"""Dynamic CSS selector and phrase management."""

import copy
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

_PATIENT_FIELD_PREFIX = "#ctl00_ctl00_BodyContent_BodyContent_TextBox"

_BANNER_CONTAINERS = [
    "div.standard-banner-message",
    ".standard-banner-message",
    ".banner-message",
]


class SelectorManager:
    """Manage CSS selectors and page phrases from external configuration.

    Values missing from the YAML file fall back to the built-in defaults key
    by key, so a file only needs to list what it overrides.
    """

    def __init__(self, selectors_file: str = "config/selectors.yaml"):
        """
        Initialize selector manager.

        Args:
            selectors_file: Path to selectors YAML file
        """
        self.selectors_file = Path(selectors_file)
        self._selectors: Dict[str, Any] = {}
        self._load_selectors()

    def _load_selectors(self) -> None:
        """Load selectors from YAML file."""
        defaults = self._get_default_selectors()
        try:
            if not self.selectors_file.exists():
                logger.warning(f"Selectors file not found: {self.selectors_file}")
                logger.info("Using default selectors")
                self._selectors = defaults
                return

            with open(self.selectors_file, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}

            if not isinstance(loaded, dict):
                raise ValueError("selectors file must contain a mapping")

            self._selectors = _deep_merge(defaults, loaded)
            version = self._selectors.get("version", "unknown")
            logger.info(f"Selectors loaded (version: {version})")

        except Exception as e:
            logger.error(f"Failed to load selectors: {e}")
            logger.info("Falling back to default selectors")
            self._selectors = defaults

    def _lookup(self, path: str) -> Any:
        value: Any = self._selectors
        for key in path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return None
        return value

    def get(self, path: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get selector by dot-notation path with caching.

        Args:
            path: Dot-separated path (e.g., "form.first_name")
            default: Default value if not found

        Returns:
            Selector string or default
        """
        return self._get_cached(path, default)

    @lru_cache(maxsize=256)
    def _get_cached(self, path: str, default: Optional[str] = None) -> Optional[str]:
        value = self._lookup(path)
        if value is None:
            logger.warning(f"Selector not found: {path}, using default: {default}")
            return default

        # {primary: ..., fallbacks: [...]} entries resolve to the primary
        if isinstance(value, dict) and "primary" in value:
            primary = value["primary"]
            return primary if isinstance(primary, str) else default

        return value if isinstance(value, str) else default

    def get_fallbacks(self, path: str) -> List[str]:
        """
        Get fallback selectors for a given path.

        Args:
            path: Dot-separated path

        Returns:
            List of fallback selectors (without primary)
        """
        value = self._lookup(path)
        if isinstance(value, dict) and "fallbacks" in value:
            fallbacks = value["fallbacks"]
            return list(fallbacks) if isinstance(fallbacks, list) else [fallbacks]
        return []

    def get_with_fallback(self, path: str) -> List[str]:
        """
        Get selector with fallback options, in priority order.

        Args:
            path: Dot-separated path

        Returns:
            List of selectors to try
        """
        selectors = []
        primary = self.get(path)
        if primary:
            selectors.append(primary)
        selectors.extend(self.get_fallbacks(path))
        return selectors

    def get_list(self, path: str) -> List[str]:
        """
        Get a list value (container selectors, phrases).

        Args:
            path: Dot-separated path

        Returns:
            List of strings, empty when the path is missing
        """
        value = self._lookup(path)
        if isinstance(value, list):
            return [str(v) for v in value]
        if isinstance(value, str):
            return [value]
        return []

    def reload(self) -> None:
        """Reload selectors from file and clear cache."""
        logger.info("Reloading selectors...")
        self._load_selectors()
        self._get_cached.cache_clear()

    def _get_default_selectors(self) -> Dict[str, Any]:
        """Get default selectors as fallback."""
        return {
            "version": "default",
            "availability": {
                "banner_containers": _BANNER_CONTAINERS + [".error-message", ".message"],
                "booked_phrases": [
                    "Please contact the office",
                    "slot is no longer available",
                    "has already been booked",
                ],
                "booked_body_phrases": [
                    "slot is no longer available",
                    "has already been booked",
                    "time slot has been taken",
                ],
            },
            "consent": {
                "guest_button": {
                    "primary": "#ContinueAsGuestButton",
                    "fallbacks": [
                        'psy-button[id="ContinueAsGuestButton"]',
                        'button:has-text("Continue Without Signing In")',
                        'button[onclick="DisplayGuestRequestForm()"]',
                    ],
                },
                "expired_banner": 'psy-banner[level="error"]',
                "expired_phrases": [
                    "Because the selected appointment is very soon, please call the office",
                ],
            },
            "form": {
                "container": "#TableRequestForm",
                "first_name": f"{_PATIENT_FIELD_PREFIX}FirstName",
                "middle_name": f"{_PATIENT_FIELD_PREFIX}MiddleName",
                "last_name": f"{_PATIENT_FIELD_PREFIX}LastName",
                "preferred_name": f"{_PATIENT_FIELD_PREFIX}PreferredName",
                "date_of_birth": f"{_PATIENT_FIELD_PREFIX}DOB",
                "phone": f"{_PATIENT_FIELD_PREFIX}MobilePhone",
                "email": f"{_PATIENT_FIELD_PREFIX}EmailAddress",
                "comments": f"{_PATIENT_FIELD_PREFIX}Comments",
            },
            "submit": {
                "button": {
                    "primary": "#ctl00_ctl00_BodyContent_BodyContent_ButtonSubmitRequest",
                    "fallbacks": ['input[value="Submit Request"]', 'input[type="submit"]'],
                },
                "success_containers": _BANNER_CONTAINERS
                + [".success-message", ".confirmation-message"],
                "success_phrases": [
                    "has been received",
                    "successfully submitted",
                    "thank you for your request",
                ],
                "error_containers": [".error-message", ".validation-summary-errors"],
            },
        }


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` onto a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# Global selector manager instance
_selector_manager: Optional[SelectorManager] = None


def get_selector_manager() -> SelectorManager:
    """Get global selector manager instance."""
    global _selector_manager
    if _selector_manager is None:
        from src.core.config.settings import get_settings

        _selector_manager = SelectorManager(get_settings().selectors_file)
    return _selector_manager


def reset_selector_manager() -> None:
    """Drop the global instance (useful for testing)."""
    global _selector_manager
    _selector_manager = None
