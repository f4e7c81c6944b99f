"""Shared URL utilities — base URL normalization and page URL resolution."""

from __future__ import annotations

import re
from urllib.parse import urljoin

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_base_url(url: str) -> str:
    """Ensure the base URL ends with ``/`` so relative paths resolve under it."""
    if url and not url.endswith("/"):
        return url + "/"
    return url


def resolve_url(path: str, base_url: str) -> str:
    """Resolve a page path or absolute URL against the base URL."""
    return urljoin(base_url, path)


def normalize_name(value: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to ``-`` and trim hyphens."""
    return _NON_ALNUM_RE.sub("-", value.lower()).strip("-")
