"""Action runner — translates Action models to Playwright calls."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar, assert_never

from playwright.async_api import Page
from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from ux_compare.models.actions import (
    Action,
    ClickAction,
    ClickXPathAction,
    GotoAction,
    PressAction,
    ReloadAction,
    SelectAction,
    SetCookieAction,
    SetLocalStorageAction,
    TypeAction,
    WaitForNavigationAction,
    WaitForSelectorAction,
    WaitForTimeoutAction,
    WaitForXPathAction,
)
from ux_compare.url_utils import resolve_url

from .browser_errors import ErrorKind, classify_error
from .session import SessionState
from .settle import SETTLE_DELAY_MS, SettleOutcome, settle_after_click

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_BACKOFF_SECONDS = 0.5

T = TypeVar("T")


class ActionResult(BaseModel):
    action_type: str
    attempts: int = 1
    settle: Optional[SettleOutcome] = None
    duration_ms: int = 0


def _kwargs(options: dict[str, Any]) -> dict[str, Any]:
    """Config options use Playwright's JS names (``clickCount``); Python wants snake_case."""
    return {to_snake(key): value for key, value in options.items()}


def _storage_text(value: Any) -> str:
    """Render a value the way the page's ``String(value)`` would.

    Objects and arrays are the exception: they are stored as JSON rather
    than ``[object Object]`` so pages can parse them back.
    """
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, dict, list)):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


async def _with_retry(operation: Callable[[], Awaitable[T]], label: str) -> tuple[T, int]:
    """Run ``operation``, retrying transient failures. Returns (result, attempts)."""
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            return await operation(), attempt
        except Exception as e:
            if classify_error(e) is ErrorKind.PERMANENT or attempt == MAX_ATTEMPTS:
                raise
            logger.warning("Transient failure on %s (attempt %d/%d): %s",
                           label, attempt, MAX_ATTEMPTS, e)
            await asyncio.sleep(RETRY_BACKOFF_SECONDS)
    raise AssertionError("unreachable")


async def _click(page: Page, action: ClickAction) -> Optional[SettleOutcome]:
    if not action.wait_for_navigation:
        await page.click(action.selector, **_kwargs(action.options))
        return None
    previous_url = page.url
    await page.click(action.selector, **_kwargs(action.options))
    outcome = await settle_after_click(page, previous_url, action.navigation_options.timeout)
    await page.wait_for_timeout(SETTLE_DELAY_MS)
    return outcome


async def _type(page: Page, action: TypeAction) -> None:
    locator = page.locator(action.selector)
    if action.options.delay is not None:
        await locator.press_sequentially(action.text, delay=action.options.delay)
    else:
        await locator.fill(action.text)


async def _wait_for_selector(page: Page, action: WaitForSelectorAction) -> None:
    kwargs: dict[str, Any] = {"state": action.options.resolved_state()}
    if action.options.timeout is not None:
        kwargs["timeout"] = action.options.timeout
    await page.wait_for_selector(action.selector, **kwargs)


async def _wait_for_xpath(page: Page, action: WaitForXPathAction) -> None:
    kwargs: dict[str, Any] = {"state": action.options.resolved_state()}
    if action.options.timeout is not None:
        kwargs["timeout"] = action.options.timeout
    await page.locator(f"xpath={action.xpath}").wait_for(**kwargs)


async def run_action(page: Page, action: Action, base_url: str) -> ActionResult:
    """Execute a single action on the Playwright page.

    Click, type and element waits retry transient failures up to
    ``MAX_ATTEMPTS`` times; every other error propagates immediately.
    """
    start = time.time()
    attempts = 1
    settle: Optional[SettleOutcome] = None

    match action:
        case GotoAction():
            url = resolve_url(action.url, base_url)
            logger.info("    → Navigating to: %s", url)
            kwargs: dict[str, Any] = {"wait_until": action.wait_until}
            if action.timeout is not None:
                kwargs["timeout"] = action.timeout
            await page.goto(url, **kwargs)

        case ReloadAction():
            logger.debug("    → Reloading (%s)", action.wait_until)
            await page.reload(wait_until=action.wait_until)

        case ClickAction():
            logger.info("    → Clicking: %s", action.selector)
            settle, attempts = await _with_retry(
                lambda: _click(page, action), f"click {action.selector}")

        case ClickXPathAction():
            logger.info("    → Clicking XPath: %s", action.xpath)
            await page.locator(f"xpath={action.xpath}").click(**_kwargs(action.options))

        case TypeAction():
            logger.info("    → Typing into: %s", action.selector)
            _, attempts = await _with_retry(
                lambda: _type(page, action), f"type {action.selector}")

        case PressAction():
            logger.debug("    → Pressing key: %s", action.key)
            await page.keyboard.press(action.key, **_kwargs(action.options))

        case SelectAction():
            logger.debug("    → Selecting %s in %s", action.choice(), action.selector)
            await page.select_option(action.selector, action.choice())

        case WaitForSelectorAction():
            logger.info("    → Waiting for selector: %s", action.selector)
            _, attempts = await _with_retry(
                lambda: _wait_for_selector(page, action), f"waitForSelector {action.selector}")

        case WaitForXPathAction():
            logger.info("    → Waiting for XPath: %s", action.xpath)
            _, attempts = await _with_retry(
                lambda: _wait_for_xpath(page, action), f"waitForXPath {action.xpath}")

        case WaitForTimeoutAction():
            logger.info("    → Waiting %dms...", action.timeout)
            await page.wait_for_timeout(action.timeout)

        case WaitForNavigationAction():
            logger.debug("    → Waiting for load state: %s", action.options.wait_until)
            await page.wait_for_load_state(
                action.options.wait_until, timeout=action.options.timeout)

        case SetCookieAction():
            logger.debug("    → Setting %d cookie(s)", len(action.cookies))
            await page.context.add_cookies(action.cookies)

        case SetLocalStorageAction():
            logger.debug("    → Setting %d localStorage item(s)", len(action.items))
            items = {key: _storage_text(value) for key, value in action.items.items()}
            await page.evaluate(
                "(items) => { for (const [k, v] of Object.entries(items)) localStorage.setItem(k, v); }",
                items,
            )

        case _:
            assert_never(action)

    duration_ms = int((time.time() - start) * 1000)
    logger.debug("    ✓ %s done in %dms", action.type, duration_ms)
    return ActionResult(
        action_type=action.type, attempts=attempts, settle=settle, duration_ms=duration_ms,
    )


def _advance(state: SessionState, action: Action, page: Page) -> SessionState:
    state = state.at(page.url)
    if isinstance(action, SetCookieAction):
        state = state.with_cookies([c.get("name", "") for c in action.cookies])
    elif isinstance(action, SetLocalStorageAction):
        state = state.with_storage_keys(list(action.items))
    return state


async def run_actions(
    page: Page, actions: list[Action], base_url: str, state: SessionState,
) -> SessionState:
    """Run actions in order, stopping at the first error. Returns the new state."""
    for action in actions:
        await run_action(page, action, base_url)
        state = _advance(state, action, page)
    return state
