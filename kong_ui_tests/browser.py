"""Session handle threaded through every workflow call."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

import anyio
from playwright.async_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeout

from kong_ui_tests.config import RunConfig

logger = logging.getLogger(__name__)


@dataclass
class ToolError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class Browser:
    """One scenario's page plus the run configuration it was opened with.

    Never shared between scenarios: anything a later scenario needs from an
    earlier one is found again by navigating Kong Manager.
    """

    def __init__(self, page: Page, config: RunConfig) -> None:
        self._page = page
        self.config = config

    @property
    def page(self) -> Page:
        return self._page

    def url(self, path: str) -> str:
        return self.config.url(path)

    async def goto(
        self,
        path: str,
        wait_until: str = "load",
        timeout: int | None = None,
    ) -> Dict[str, Any]:
        """Navigate to a path under the base URL.

        Raises ToolError for any navigation failure (timeout, refused
        connection, aborted request) so callers can choose a fallback.
        """
        url = self.url(path)
        try:
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout)
        except PlaywrightError as exc:
            raise ToolError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc)) from exc
        return {"url": self._page.url, "status": response.status if response else None}

    async def wait_for_network_idle(self, timeout: int | None = None) -> bool:
        """Wait until no requests are in flight.

        Returns False when the page never went quiet; long-polling views keep
        a connection open, so this is logged rather than raised.
        """
        try:
            await self._page.wait_for_load_state("networkidle", timeout=timeout)
            return True
        except PlaywrightTimeout:
            logger.warning(f"Network did not go idle on {self._page.url}")
            return False

    async def settle(self, delay_ms: int) -> None:
        if delay_ms > 0:
            await anyio.sleep(delay_ms / 1000)
