"""
Direct Playwright Client
========================

Launches the configured browser in-process and hands out one isolated
BrowserContext per scenario. The context carries the Kong Manager base URL,
the device descriptor and the default action timeout from RunConfig.

Usage:
    from kong_ui_tests.playwright_client import PlaywrightClient

    async with PlaywrightClient(settings) as client:
        await client.page.goto("/default/services")
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from kong_ui_tests.config import RunConfig

logger = logging.getLogger(__name__)


class PlaywrightClient:
    """
    Direct Playwright client for one scenario.

    Example:
        async with PlaywrightClient(settings) as client:
            page = client.page
            await page.goto("/")
    """

    def __init__(self, config: RunConfig, headless: Optional[bool] = None):
        """
        Initialize Playwright client.

        Args:
            config: Resolved run configuration
            headless: Override for config.headless (None = use config)
        """
        self.config = config
        self.browser_type = config.browser
        self.headless = config.headless if headless is None else headless
        self.timeout = config.action_timeout_ms

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._tracing = False

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def context_options(self) -> Dict[str, Any]:
        """Options for new_context: device descriptor first, then base URL."""
        options: Dict[str, Any] = {}
        if self.config.device and self._playwright is not None:
            descriptor = self._playwright.devices.get(self.config.device)
            if descriptor is None:
                logger.warning(f"Unknown device descriptor {self.config.device!r}, using browser defaults")
            else:
                options.update(descriptor)
                # default_browser_type is a launch hint, not a context option
                options.pop("default_browser_type", None)
        options["base_url"] = self.config.url("/")
        return options

    async def connect(self):
        """Launch the browser and open the scenario's context and page."""
        self._playwright = await async_playwright().start()

        launcher = getattr(self._playwright, self.browser_type)
        self._browser = await launcher.launch(headless=self.headless)
        logger.debug(f"Launched {self.browser_type} (headless={self.headless})")

        self._context = await self._browser.new_context(**self.context_options())
        self._context.set_default_timeout(self.timeout)
        self._page = await self._context.new_page()

    async def start_tracing(self) -> None:
        """Begin recording a Playwright trace for this context."""
        await self.context.tracing.start(screenshots=True, snapshots=True, sources=True)
        self._tracing = True

    async def stop_tracing(self, path: Optional[Path]) -> Optional[Path]:
        """Stop tracing; write the archive to `path` or discard it when None."""
        if not self._tracing:
            return None
        self._tracing = False
        if path is None:
            await self.context.tracing.stop()
            return None
        os.makedirs(path.parent, exist_ok=True)
        await self.context.tracing.stop(path=str(path))
        logger.info(f"Trace written to {path}")
        return path

    async def close(self):
        """Close all connections and cleanup resources."""
        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def context(self) -> BrowserContext:
        if not self._context:
            raise RuntimeError("Client not connected")
        return self._context

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page
