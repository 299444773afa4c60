"""In-memory stand-ins for the parts of Playwright's Page/Locator the helpers use.

Elements are registered on a FakePage under the key the helper will build:
a CSS selector as-is, `testid=<id>` for get_by_test_id, `role=<role>[<name>]`
for get_by_role (regex patterns by their source), and
`<parent> >> text=<pattern>` for Locator.filter(has_text=...).
"""
import dataclasses
import re
from typing import Callable, Dict, List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeout

from kong_ui_tests.browser import Browser
from kong_ui_tests.config import RunConfig

pytest_plugins = ["pytester"]


class FakeElement:
    def __init__(
        self,
        visible: bool = True,
        tag: str = "INPUT",
        attrs: Optional[Dict[str, str]] = None,
        on_click: Optional[Callable[[], None]] = None,
        error: Optional[Exception] = None,
    ):
        self.visible = visible
        self.tag = tag
        self.attrs = attrs or {}
        self.on_click = on_click
        self.error = error
        self.value: Optional[str] = None
        self.clicks = 0
        self.selected: Optional[dict] = None


class FakeLocator:
    def __init__(self, page: "FakePage", key: str, elements: Optional[List[FakeElement]] = None):
        self.page = page
        self.key = key
        self._elements = elements

    @property
    def elements(self) -> List[FakeElement]:
        if self._elements is not None:
            return self._elements
        return self.page.elements.get(self.key, [])

    def _one(self) -> FakeElement:
        if not self.elements:
            raise PlaywrightTimeout(f"Timeout waiting for {self.key}")
        element = self.elements[0]
        if element.error is not None:
            raise element.error
        return element

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.key, self.elements[:1])

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, f"{self.key}[{index}]", self.elements[index:index + 1])

    def filter(self, has_text=None) -> "FakeLocator":
        pattern = has_text.pattern if isinstance(has_text, re.Pattern) else has_text
        return FakeLocator(self.page, f"{self.key} >> text={pattern}")

    async def count(self) -> int:
        return len(self.elements)

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        self.page.waits.append((self.key, timeout))
        if not self.elements or not self.elements[0].visible:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {self.key}")

    async def is_visible(self) -> bool:
        return bool(self.elements) and self.elements[0].visible

    async def get_attribute(self, name: str) -> Optional[str]:
        return self._one().attrs.get(name)

    async def fill(self, value: str) -> None:
        element = self._one()
        element.value = value
        self.page.actions.append(("fill", self.key, value))

    async def click(self, timeout: Optional[float] = None) -> None:
        element = self._one()
        element.clicks += 1
        self.page.actions.append(("click", self.key))
        if element.on_click is not None:
            element.on_click()

    async def evaluate(self, expression: str):
        return self._one().tag

    async def select_option(self, value=None, label=None) -> None:
        element = self._one()
        element.selected = {"value": value, "label": label}
        self.page.actions.append(("select", self.key, value if label is None else label))


class FakePage:
    def __init__(self):
        self.elements: Dict[str, List[FakeElement]] = {}
        self.goto_errors: Dict[str, Exception] = {}
        self.visits: List[str] = []
        self.actions: list = []
        self.waits: list = []
        self.load_states: List[str] = []
        self.url = "about:blank"

    def add(self, key: str, **kwargs) -> FakeElement:
        element = FakeElement(**kwargs)
        self.elements.setdefault(key, []).append(element)
        return element

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def get_by_test_id(self, test_id: str) -> FakeLocator:
        return FakeLocator(self, f"testid={test_id}")

    def get_by_role(self, role: str, name=None, exact=None) -> FakeLocator:
        label = name.pattern if isinstance(name, re.Pattern) else name
        return FakeLocator(self, f"role={role}[{label}]")

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None):
        self.visits.append(url)
        for suffix, error in self.goto_errors.items():
            if url.endswith(suffix):
                raise error
        self.url = url
        return None

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None:
        self.load_states.append(state)


@pytest.fixture
def run_config() -> RunConfig:
    """Defaults with every settle delay removed."""
    return dataclasses.replace(
        RunConfig(),
        render_settle_ms=0,
        modal_settle_ms=0,
        service_settle_ms=0,
        submit_settle_ms=0,
    )


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def browser(page, run_config) -> Browser:
    return Browser(page, run_config)
