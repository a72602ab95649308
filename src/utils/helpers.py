"""Helper utilities for common bot operations."""

import re
from typing import Literal, Optional
from urllib.parse import parse_qs, urlparse

from loguru import logger
from playwright.async_api import Page

from ..constants import Timeouts
from ..core.exceptions import ValidationError
from ..utils.masking import mask_email

__all__ = [
    "extract_clinician_id",
    "mask_sensitive_data",
    "normalize_text",
    "require_booking_href",
    "safe_navigate",
]

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]


def extract_clinician_id(href: str) -> str:
    """
    Extract the clinician identifier from a booking URL.

    Args:
        href: Appointment booking URL

    Returns:
        Value of the ``clinician`` query parameter, or an empty string when the
        parameter is absent or the URL cannot be parsed

    Examples:
        >>> extract_clinician_id("https://portal.example/Appt?clinician=42&slot=9")
        '42'
        >>> extract_clinician_id("not a url")
        ''
    """
    try:
        query = urlparse(href).query
        values = parse_qs(query).get("clinician")
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not parse booking URL for clinician id: {e}")
        return ""
    return values[0].strip() if values else ""


def require_booking_href(href: Optional[str]) -> str:
    """
    Validate an appointment booking URL.

    Args:
        href: URL supplied by an API caller or on the command line

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL
    """
    href = (href or "").strip()
    parsed = urlparse(href)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("href must be an absolute http(s) URL", field="href")
    return href


def mask_sensitive_data(text: str) -> str:
    """
    Mask email addresses embedded in page text before it is logged.

    Args:
        text: Text that may contain sensitive data

    Returns:
        Text with sensitive data masked
    """
    return re.sub(
        r"\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b",
        lambda m: mask_email(m.group()),
        text,
    )


def normalize_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace in scraped text."""
    if not text:
        return ""
    return " ".join(text.split())


async def safe_navigate(
    page: Page,
    url: str,
    wait_until: Optional[WaitUntil] = "networkidle",
    timeout: Optional[int] = None,
) -> bool:
    """
    Safely navigate to URL with error handling.

    Args:
        page: Playwright page object
        url: URL to navigate to
        wait_until: Wait condition
        timeout: Optional timeout in milliseconds

    Returns:
        True if navigation successful
    """
    timeout = timeout or Timeouts.NAVIGATION
    try:
        await page.goto(url, wait_until=wait_until, timeout=timeout)
        return True
    except Exception as e:
        logger.error(f"Failed to navigate to {url}: {e}")
        return False
