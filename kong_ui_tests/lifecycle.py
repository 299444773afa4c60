"""Per-scenario preparation: reachability check and modal dismissal."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from playwright.async_api import TimeoutError as PlaywrightTimeout

from kong_ui_tests import locators
from kong_ui_tests.browser import Browser, ToolError
from kong_ui_tests.locators import first_visible

logger = logging.getLogger(__name__)

UNREACHABLE_REASON = "Kong Manager not reachable at base URL; skipping UI tests"


@dataclass
class TargetUnreachable(ToolError):
    """Kong Manager did not load; scenarios are skipped, not failed."""


async def dismiss_modal(browser: Browser) -> bool:
    """Close a license or onboarding dialog if one is showing."""
    config = browser.config
    result = await first_visible(browser.page, [locators.MODAL_CONFIRM], config.affordance_timeout_ms)
    if not result:
        return False
    await result.locator.click()
    await browser.settle(config.modal_settle_ms)
    logger.info("Dismissed blocking dialog")
    return True


async def ensure_app_ready(browser: Browser) -> bool:
    """Load the Kong Manager root and clear any blocking dialog.

    Raises TargetUnreachable when the root page or its layout container
    does not appear. Returns whether a dialog was dismissed.
    """
    config = browser.config
    try:
        await browser.goto("/", wait_until="domcontentloaded", timeout=config.navigation_timeout_ms)
        await browser.page.locator(locators.APP_CONTAINER).first.wait_for(timeout=config.app_ready_timeout_ms)
    except ToolError as exc:
        raise TargetUnreachable(name="ensure_app_ready", payload={"url": config.url("/")}, message=exc.message) from exc
    except PlaywrightTimeout as exc:
        raise TargetUnreachable(name="ensure_app_ready", payload={"url": config.url("/")}, message=str(exc)) from exc

    await browser.settle(config.render_settle_ms)
    return await dismiss_modal(browser)
