"""Reusable Kong Manager workflows: form filling, Services and Routes."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Set

from playwright.async_api import (
    Error as PlaywrightError,
    Locator,
    TimeoutError as PlaywrightTimeout,
    expect,
)

from kong_ui_tests import locators
from kong_ui_tests.browser import Browser, ToolError
from kong_ui_tests.locators import Candidate, first_visible, is_visible_within

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceSpec:
    name: str
    url: str


@dataclass(frozen=True)
class RouteSpec:
    name: str
    path: str
    service: str
    protocol: str = "http"


@dataclass
class RouteFormReport:
    """What the route workflow managed to do, for logs and assertions."""

    navigation: str = ""
    name_filled: bool = False
    path_filled: bool = False
    protocol_selected: bool = False
    service_bound: bool = False
    submitted: bool = False


# ---------------------------------------------------------------------------
# Form filling
# ---------------------------------------------------------------------------

async def fill_if_visible(
    browser: Browser,
    target: str | Locator,
    value: str,
    timeout_ms: int | None = None,
) -> bool:
    """Fill the first match of `target` if it shows up; otherwise do nothing.

    Returns whether the field was filled. A missing field is not an error.
    """
    locator = browser.page.locator(target) if isinstance(target, str) else target
    field = locator.first
    timeout = browser.config.probe_timeout_ms if timeout_ms is None else timeout_ms
    if not await is_visible_within(field, timeout):
        logger.debug(f"Field {target} not visible, skipping")
        return False
    await field.fill(value)
    return True


async def fill_first_visible(browser: Browser, candidates: Sequence[Candidate], value: str) -> bool:
    result = await first_visible(browser.page, candidates, browser.config.probe_timeout_ms)
    if not result:
        return False
    await result.locator.fill(value)
    return True


def classify_text_input(name: str | None, placeholder: str | None) -> str | None:
    """Guess what an unlabelled route-form text input is for.

    An input with neither a name nor a placeholder is taken as the route
    name; anything mentioning "path" is the path field.
    """
    if not name and not placeholder:
        return "name"
    if "path" in (placeholder or "").lower() or "path" in (name or "").lower():
        return "path"
    return None


async def scan_text_inputs(browser: Browser, values: Mapping[str, str]) -> Set[str]:
    """Fill fields by walking the visible text inputs in document order.

    `values` maps a field kind from classify_text_input to the value to
    write. Returns the kinds that were filled.
    """
    inputs = browser.page.locator(locators.TEXT_INPUTS)
    count = await inputs.count()
    filled: Set[str] = set()
    for index in range(count):
        if filled >= set(values):
            break
        field = inputs.nth(index)
        if not await field.is_visible():
            continue
        kind = classify_text_input(
            await field.get_attribute("name"),
            await field.get_attribute("placeholder"),
        )
        if kind in values and kind not in filled:
            await field.fill(values[kind])
            filled.add(kind)
    return filled


# ---------------------------------------------------------------------------
# Assertions
# ---------------------------------------------------------------------------

async def assert_resource_listed(
    browser: Browser,
    collection: str,
    name: str,
    timeout_ms: int | None = None,
) -> None:
    """Open a workspace list view and require exactly one entry named `name`."""
    config = browser.config
    await browser.goto(config.workspace_path(collection), wait_until="domcontentloaded")
    await browser.settle(config.render_settle_ms)
    await browser.wait_for_network_idle()
    entry = locators.list_entry(name).resolve(browser.page)
    await expect(entry).to_be_visible(timeout=timeout_ms or config.expect_timeout_ms)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

async def create_service(browser: Browser, service: ServiceSpec) -> None:
    """Create a Gateway Service through the form.

    Success is not checked here; callers confirm via the services list.
    """
    config = browser.config
    try:
        await browser.goto(config.workspace_path("services", "create"))
    except ToolError as exc:
        logger.info(f"Service form not reachable directly ({exc.message}); using the new-service control")
        await locators.NEW_SERVICE_BUTTON.resolve(browser.page).click()
    await browser.wait_for_network_idle()

    await fill_if_visible(browser, locators.SERVICE_NAME_INPUT, service.name)
    await fill_if_visible(browser, locators.SERVICE_URL_INPUT, service.url)

    await locators.SAVE_BUTTON.resolve(browser.page).click()
    await browser.wait_for_network_idle()
    await browser.settle(config.service_settle_ms)
    logger.info(f"Submitted service {service.name!r} -> {service.url}")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

async def open_route_form(browser: Browser, service: str) -> str:
    """Reach the route form, preferring the service's own Routes tab.

    Returns "service-detail" when the in-UI path worked and "direct" when
    the create URL had to be opened instead.
    """
    config = browser.config
    page = browser.page

    await browser.goto(config.workspace_path("services"), wait_until="domcontentloaded")
    await browser.wait_for_network_idle()
    service_entry = locators.list_entry(service).resolve(page).first
    try:
        await service_entry.wait_for(state="visible", timeout=config.list_entry_timeout_ms)
    except PlaywrightTimeout as exc:
        raise AssertionError(f"Service {service!r} is not listed; it must exist before a route is added") from exc
    await service_entry.click()
    await browser.wait_for_network_idle()
    await browser.settle(config.render_settle_ms)

    routes_link = await first_visible(page, [locators.ROUTES_LINK], config.affordance_timeout_ms)
    if routes_link:
        await routes_link.locator.click()
        await browser.wait_for_network_idle()
        new_route = await first_visible(page, [locators.NEW_ROUTE_BUTTON], config.affordance_timeout_ms)
        if new_route:
            await new_route.locator.click()
            await browser.wait_for_network_idle()
            return "service-detail"
        logger.info("No create control on the service's Routes tab; opening the route form directly")
    else:
        logger.info(f"Service {service!r} has no Routes link; opening the route form directly")

    await browser.goto(config.workspace_path("routes", "create"), wait_until="domcontentloaded")
    await browser.wait_for_network_idle()
    return "direct"


async def fill_route_fields(browser: Browser, name: str, path: str) -> Dict[str, bool]:
    """Fill route name and path: test ids, then the input scan, then attributes."""
    page = browser.page
    filled = {
        "name": await fill_if_visible(browser, locators.ROUTE_NAME_TEST_ID.resolve(page), name),
        "path": await fill_if_visible(browser, locators.ROUTE_PATH_TEST_ID.resolve(page), path),
    }

    pending = {kind: value for kind, value in (("name", name), ("path", path)) if not filled[kind]}
    if pending:
        logger.info(f"Scanning text inputs for {', '.join(sorted(pending))}")
        for kind in await scan_text_inputs(browser, pending):
            filled[kind] = True

    if not filled["name"]:
        filled["name"] = await fill_first_visible(browser, locators.ROUTE_NAME_FALLBACKS, name)
    if not filled["path"]:
        filled["path"] = await fill_first_visible(browser, locators.ROUTE_PATH_FALLBACKS, path)
    return filled


def _option_named(label: str) -> re.Pattern[str]:
    """Whole-label match, so "http" never picks "https" nor "svc" picks "svc-2"."""
    return re.compile(rf"^\s*{re.escape(label)}\s*$", re.I)


async def select_protocol(browser: Browser, protocol: str) -> bool:
    """Pick the protocol on whichever protocol control the form renders."""
    page = browser.page
    result = await first_visible(page, locators.PROTOCOL_CONTROLS, browser.config.probe_timeout_ms)
    if not result:
        logger.debug("Route form has no protocol control")
        return False
    control = result.locator
    try:
        tag = await control.evaluate("el => el.tagName")
        if tag == "SELECT":
            await control.select_option(protocol)
        else:
            await control.click()
            option = page.get_by_role("option", name=_option_named(protocol)).first
            await option.click(timeout=browser.config.probe_timeout_ms)
    except PlaywrightError as exc:
        logger.info(f"Protocol {protocol!r} not applied via {result.candidate.description}: {exc}")
        return False
    return True


async def bind_service(browser: Browser, service: str) -> bool:
    """Choose the parent Service when the form shows a service picker."""
    page = browser.page
    config = browser.config
    result = await first_visible(page, locators.SERVICE_PICKER, config.probe_timeout_ms)
    if not result:
        logger.debug("Route form has no service picker")
        return False
    picker = result.locator
    try:
        tag = await picker.evaluate("el => el.tagName")
        if tag == "SELECT":
            await picker.select_option(label=service)
        else:
            await picker.click()
            if tag == "INPUT":
                await picker.fill(service)
            option = page.get_by_role("option", name=_option_named(service)).first
            await option.click(timeout=config.affordance_timeout_ms)
    except PlaywrightError as exc:
        logger.info(f"Service {service!r} not selected via {result.candidate.description}: {exc}")
        return False
    return True


async def submit_form(browser: Browser) -> bool:
    """Click the save/create/submit control; give up quietly if there is none."""
    config = browser.config
    strategies = (
        (locators.SUBMIT_BY_ROLE, config.affordance_timeout_ms),
        (locators.SUBMIT_BY_TEXT, config.secondary_probe_timeout_ms),
    )
    for candidate, timeout in strategies:
        result = await first_visible(browser.page, [candidate], timeout)
        if result:
            await result.locator.click()
            await browser.settle(config.submit_settle_ms)
            await browser.wait_for_network_idle()
            return True
    logger.warning("No submit control found on the route form")
    return False


async def create_route(browser: Browser, route: RouteSpec, confirm: bool = True) -> RouteFormReport:
    """Create a Route bound to an existing Service.

    Every step after reaching the form is best effort; the closing check
    against the routes list is what decides success.
    """
    report = RouteFormReport()
    report.navigation = await open_route_form(browser, route.service)
    await browser.settle(browser.config.render_settle_ms)

    filled = await fill_route_fields(browser, route.name, route.path)
    report.name_filled = filled["name"]
    report.path_filled = filled["path"]
    report.protocol_selected = await select_protocol(browser, route.protocol)
    report.service_bound = await bind_service(browser, route.service)
    report.submitted = await submit_form(browser)
    logger.info(f"Route {route.name!r} form: {report}")

    if confirm:
        await assert_resource_listed(browser, "routes", route.name, timeout_ms=browser.config.confirm_timeout_ms)
    return report
