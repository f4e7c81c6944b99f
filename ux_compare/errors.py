"""Exception types shared across the pipeline."""

from __future__ import annotations


class ConfigError(Exception):
    """Configuration is missing, unreadable or invalid. Raised before any capture."""


class CaptureError(Exception):
    """A page could not be captured for a viewport. Aborts the run."""

    def __init__(self, name: str, viewport: str, url: str, reason: str):
        super().__init__(f"Error capturing {name} ({viewport}) at {url}: {reason}")
        self.name = name
        self.viewport = viewport
        self.url = url
