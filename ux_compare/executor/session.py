"""Session state threaded through the capture loop.

The single browser page is reused across viewports and pages. This value
records what the pipeline has done to it so reuse decisions (skip a redundant
navigation, run global setup once) are explicit.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    viewport: Optional[str] = None
    url: str = "about:blank"
    setup_done: bool = False
    cookies: tuple[str, ...] = ()
    storage_keys: tuple[str, ...] = ()

    def needs_navigation(self, url: str) -> bool:
        return self.url != url

    def at(self, url: str) -> "SessionState":
        return self.model_copy(update={"url": url})

    def with_viewport(self, name: str) -> "SessionState":
        return self.model_copy(update={"viewport": name})

    def with_setup_done(self) -> "SessionState":
        return self.model_copy(update={"setup_done": True})

    def with_cookies(self, names: list[str]) -> "SessionState":
        return self.model_copy(update={"cookies": self.cookies + tuple(names)})

    def with_storage_keys(self, keys: list[str]) -> "SessionState":
        return self.model_copy(update={"storage_keys": self.storage_keys + tuple(keys)})
