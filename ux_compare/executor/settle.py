"""Post-click settle handling for single-page applications.

SPA clicks may change the URL, trigger network traffic, both, or neither.
Rather than waiting on one signal, both are raced under a shared bound and
the caller is told which one fired, or that neither did.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from playwright.async_api import Page

from .browser_errors import is_timeout

logger = logging.getLogger(__name__)

SETTLE_DELAY_MS = 500


class SettleOutcome(str, Enum):
    URL_CHANGED = "url_changed"
    NETWORK_IDLE = "network_idle"
    UNCONFIRMED = "unconfirmed"  # bound elapsed with neither signal


async def settle_after_click(page: Page, previous_url: str, timeout_ms: int) -> SettleOutcome:
    """Wait for the URL to change or the network to go idle, whichever is first.

    Playwright timeouts from either waiter are expected and lead to
    ``UNCONFIRMED`` once both have given up. Any other error is raised when
    no waiter succeeded.
    """
    waiters = {
        asyncio.ensure_future(page.wait_for_url(
            lambda url: url != previous_url, timeout=timeout_ms, wait_until="commit",
        )): SettleOutcome.URL_CHANGED,
        asyncio.ensure_future(page.wait_for_load_state(
            "networkidle", timeout=timeout_ms,
        )): SettleOutcome.NETWORK_IDLE,
    }
    pending = set(waiters)
    errors: list[BaseException] = []
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            # dict order gives URL change precedence when both finish together
            for task, outcome in waiters.items():
                if task not in done:
                    continue
                error = task.exception()
                if error is None:
                    logger.debug("Settled after click: %s", outcome.value)
                    return outcome
                errors.append(error)
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    for error in errors:
        if not is_timeout(error):
            raise error
    logger.info("Click did not change URL or reach network idle within %dms, continuing",
                timeout_ms)
    return SettleOutcome.UNCONFIRMED
