import logging

import pytest
import pytest_asyncio

from kong_ui_tests import serial, tracing
from kong_ui_tests.browser import Browser
from kong_ui_tests.config import settings
from kong_ui_tests.lifecycle import UNREACHABLE_REASON, TargetUnreachable, ensure_app_ready
from kong_ui_tests.playwright_client import PlaywrightClient

logger = logging.getLogger(__name__)


# ============================================================================
# Reporting hooks
# ============================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item (item.rep_setup, item.rep_call)."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


def pytest_configure(config):
    # Installed runs have no pytest.ini; --strict-markers still needs this
    config.addinivalue_line("markers", f"{serial.MARKER}: ordered scenario group, skipped after a failure")
    if settings.serial and not config.pluginmanager.has_plugin("kong-serial-groups"):
        config.pluginmanager.register(serial.SerialGroups(config), "kong-serial-groups")


def _failed(item) -> bool:
    return any(
        getattr(item, f"rep_{when}", None) is not None and getattr(item, f"rep_{when}").failed
        for when in ("setup", "call")
    )


# ============================================================================
# Browser fixtures
# ============================================================================

@pytest_asyncio.fixture()
async def playwright_client(request):
    """Launch a browser with a fresh context for this scenario.

    Records a trace according to the configured policy; with
    "on-first-retry" that is the second attempt made by pytest-rerunfailures.
    """
    attempt = getattr(request.node, "execution_count", 1)
    async with PlaywrightClient(settings) as client:
        record = tracing.should_record(settings.trace, attempt)
        if record:
            await client.start_tracing()
        yield client
        if record:
            keep = tracing.should_keep(settings.trace, _failed(request.node))
            path = tracing.trace_path(settings.output_dir, request.node.nodeid, attempt) if keep else None
            await client.stop_tracing(path)


@pytest_asyncio.fixture()
async def browser(playwright_client):
    """Session handle for one scenario."""
    return Browser(playwright_client.page, settings)


@pytest_asyncio.fixture()
async def kong_manager(browser):
    """Browser prepared for a scenario: Kong Manager loaded, dialogs closed.

    Skips the scenario when Kong Manager cannot be reached.
    """
    try:
        await ensure_app_ready(browser)
    except TargetUnreachable as exc:
        logger.warning(f"{UNREACHABLE_REASON}: {exc.message}")
        pytest.skip(UNREACHABLE_REASON)
    return browser
