import pytest
from playwright.async_api import Error as PlaywrightError

from kong_ui_tests import locators
from kong_ui_tests.lifecycle import TargetUnreachable, dismiss_modal, ensure_app_ready

pytestmark = pytest.mark.asyncio

DIALOG_OK = "role=button[OK]"


async def test_ready_without_modal(browser, page, run_config):
    page.add(locators.APP_CONTAINER, tag="DIV")

    assert await ensure_app_ready(browser) is False
    assert page.visits == ["http://localhost:8002/"]
    assert (locators.APP_CONTAINER, run_config.app_ready_timeout_ms) in page.waits


async def test_license_modal_is_dismissed(browser, page):
    page.add(locators.APP_CONTAINER, tag="DIV")
    ok = page.add(DIALOG_OK, tag="BUTTON")

    assert await ensure_app_ready(browser) is True
    assert ok.clicks == 1


async def test_no_modal_costs_one_probe(browser, page, run_config):
    assert not await dismiss_modal(browser)
    assert page.waits == [(DIALOG_OK, run_config.affordance_timeout_ms)]


async def test_buttons_merely_containing_ok_are_left_alone(browser, page):
    webhooks = page.add('button:has-text("OK")', tag="BUTTON")

    assert not await dismiss_modal(browser)
    assert webhooks.clicks == 0
    assert page.actions == []


async def test_navigation_failure_means_unreachable(browser, page):
    page.goto_errors["/"] = PlaywrightError("net::ERR_CONNECTION_REFUSED at http://localhost:8002/")

    with pytest.raises(TargetUnreachable) as excinfo:
        await ensure_app_ready(browser)

    assert "ERR_CONNECTION_REFUSED" in excinfo.value.message
    assert excinfo.value.payload == {"url": "http://localhost:8002/"}


async def test_missing_layout_means_unreachable(browser, page):
    with pytest.raises(TargetUnreachable):
        await ensure_app_ready(browser)

    assert page.actions == []
