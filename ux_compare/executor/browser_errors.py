"""Classification of browser-automation errors into transient and permanent."""

from __future__ import annotations

from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class ErrorKind(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"


# Playwright reports these only through the message text, so matching is
# confined to this module.
_TRANSIENT_MARKERS = (
    "Target page, context or browser has been closed",
    "Target closed",
    "Execution context was destroyed",
    "Unable to find element",
)


def classify_error(error: BaseException) -> ErrorKind:
    """Tag an exception raised by a page call as transient or permanent."""
    if isinstance(error, PlaywrightTimeoutError):
        return ErrorKind.PERMANENT
    if isinstance(error, PlaywrightError):
        message = str(error)
        if any(marker in message for marker in _TRANSIENT_MARKERS):
            return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT


def is_timeout(error: BaseException) -> bool:
    return isinstance(error, PlaywrightTimeoutError)
