"""Ordered locator candidates and the first-visible combinator.

Kong Manager's markup shifts between releases, so most controls are
described by a list of candidates instead of one selector. `first_visible`
walks the list and returns a tagged result instead of raising.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from playwright.async_api import Locator, Page, TimeoutError as PlaywrightTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """One way of finding a control on the page."""

    description: str
    resolve: Callable[[Page], Locator]

    @classmethod
    def css(cls, selector: str) -> "Candidate":
        return cls(selector, lambda page: page.locator(selector))

    @classmethod
    def test_id(cls, test_id: str) -> "Candidate":
        return cls(f"data-testid={test_id}", lambda page: page.get_by_test_id(test_id))

    @classmethod
    def role(cls, role: str, name: str | re.Pattern[str], exact: bool | None = None) -> "Candidate":
        label = name.pattern if isinstance(name, re.Pattern) else name
        return cls(f"role={role}[name={label}]", lambda page: page.get_by_role(role, name=name, exact=exact))

    @classmethod
    def button_text(cls, pattern: re.Pattern[str]) -> "Candidate":
        return cls(
            f"button:text={pattern.pattern}",
            lambda page: page.locator("button").filter(has_text=pattern),
        )


@dataclass(frozen=True)
class LocatorResult:
    """Outcome of a candidate search: found with its locator, or not found."""

    found: bool
    locator: Optional[Locator] = None
    candidate: Optional[Candidate] = None

    @classmethod
    def not_found(cls) -> "LocatorResult":
        return cls(found=False)

    def __bool__(self) -> bool:
        return self.found


async def is_visible_within(locator: Locator, timeout_ms: int) -> bool:
    """Poll until the locator is visible; False on timeout.

    Only the timeout is treated as "absent". Other driver errors (closed
    page, detached frame) propagate.
    """
    try:
        await locator.wait_for(state="visible", timeout=timeout_ms)
        return True
    except PlaywrightTimeout:
        return False


async def first_visible(
    page: Page,
    candidates: Sequence[Candidate],
    timeout_ms: int,
) -> LocatorResult:
    """Return the first candidate whose first match becomes visible."""
    for candidate in candidates:
        locator = candidate.resolve(page).first
        if await is_visible_within(locator, timeout_ms):
            logger.debug(f"Matched {candidate.description}")
            return LocatorResult(found=True, locator=locator, candidate=candidate)
        logger.debug(f"No visible match for {candidate.description}")
    return LocatorResult.not_found()


# ---------------------------------------------------------------------------
# Kong Manager controls
# ---------------------------------------------------------------------------

APP_CONTAINER = '[data-testid="app-layout"], [class*="main"], body'

MODAL_CONFIRM = Candidate.role("button", "OK", exact=True)

NEW_SERVICE_BUTTON = Candidate.test_id("new-gateway-service")
SERVICE_NAME_INPUT = 'input[name*="name" i]'
SERVICE_URL_INPUT = 'input[name*="url" i]'
SAVE_BUTTON = Candidate.role("button", re.compile(r"save", re.I))

ROUTES_LINK = Candidate.role("link", re.compile(r"routes", re.I))
NEW_ROUTE_BUTTON = Candidate.role("button", re.compile(r"new|create", re.I))

ROUTE_NAME_TEST_ID = Candidate.test_id("route-form-name")
ROUTE_PATH_TEST_ID = Candidate.test_id("route-form-paths-input-1")
ROUTE_NAME_FALLBACKS = [
    Candidate.css('input[placeholder*="name" i], input[name*="name" i], label:has-text("Name") ~ input'),
]
ROUTE_PATH_FALLBACKS = [
    Candidate.css('input[placeholder*="path" i], input[name*="path" i]'),
]
TEXT_INPUTS = 'input[type="text"]'

PROTOCOL_CONTROLS = [
    Candidate.css('select[name*="protocol" i]'),
    Candidate.css('[role="combobox"][aria-label*="protocol" i]'),
    Candidate.css('input[name*="protocol" i]'),
    Candidate.css('div[class*="protocol"] select'),
    Candidate.css('div[class*="protocol"] input'),
]

SERVICE_PICKER = [
    Candidate.test_id("route-form-service-id"),
    Candidate.css('select[name*="service" i]'),
    Candidate.css('[role="combobox"][aria-label*="service" i]'),
    Candidate.css('input[placeholder*="service" i]'),
]

_SUBMIT_LABEL = re.compile(r"save|create|submit", re.I)
SUBMIT_BY_ROLE = Candidate.role("button", _SUBMIT_LABEL)
SUBMIT_BY_TEXT = Candidate.button_text(_SUBMIT_LABEL)


def list_entry(name: str) -> Candidate:
    """Entities in Kong Manager list views render their name as a button."""
    return Candidate.role("button", name, exact=True)
