"""Run configuration for the Kong Manager UI suite.

Values resolve in this order: process environment, `.env.defaults`,
built-in default. The CI flag (`CI`) switches the retry and worker defaults
the same way the gateway team's Playwright config did:

- retries: 2 under CI, 0 locally
- workers: 1 under CI, runner default locally

The resolved configuration is immutable for the whole run.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urljoin

from kong_ui_tests.env_defaults import load_env_defaults

logger = logging.getLogger(__name__)

TRACE_POLICIES = ("off", "on", "on-first-retry", "retain-on-failure")
EXECUTION_MODES = ("serial", "parallel")
REPORTERS = ("html", "none")
BROWSERS = ("chromium", "firefox", "webkit")

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RunConfig:
    """Process-wide settings for one test run."""

    base_url: str = "http://localhost:8002/"
    workspace: str = "default"

    # Timeouts in milliseconds
    expect_timeout_ms: int = 20000
    action_timeout_ms: int = 30000
    navigation_timeout_ms: int = 15000
    app_ready_timeout_ms: int = 10000
    probe_timeout_ms: int = 2000
    affordance_timeout_ms: int = 5000
    secondary_probe_timeout_ms: int = 3000
    list_entry_timeout_ms: int = 10000

    # Settle delays in milliseconds (the UI gives no save-complete signal)
    render_settle_ms: int = 2000
    modal_settle_ms: int = 1000
    service_settle_ms: int = 5000
    submit_settle_ms: int = 3000

    ci: bool = False
    retries: int = 0
    workers: Optional[int] = None
    execution: str = "serial"
    reporter: str = "html"
    report_dir: str = "playwright-report"
    trace: str = "on-first-retry"
    output_dir: str = "test-results"

    browser: str = "chromium"
    device: Optional[str] = "Desktop Chrome"
    headless: bool = True

    @property
    def serial(self) -> bool:
        return self.execution == "serial"

    @property
    def confirm_timeout_ms(self) -> int:
        """Extended wait for a freshly created entity to appear in its list."""
        return max(self.list_entry_timeout_ms, self.expect_timeout_ms)

    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def workspace_path(self, *parts: str) -> str:
        """Build a workspace-scoped path such as `/default/services/create`."""
        segments = [self.workspace.strip("/")] + [p.strip("/") for p in parts if p]
        return "/" + "/".join(segments)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE


def _as_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {value!r}") from None


def _choice(key: str, value: str, allowed: tuple[str, ...]) -> str:
    value = value.strip().lower()
    if value not in allowed:
        raise ValueError(f"{key} must be one of {', '.join(allowed)}; got {value!r}")
    return value


def load_run_config(
    environ: Mapping[str, str] | None = None,
    defaults: Mapping[str, str] | None = None,
) -> RunConfig:
    """Resolve a RunConfig from the environment and `.env.defaults`."""
    env = os.environ if environ is None else environ
    fallback = load_env_defaults() if defaults is None else defaults

    def lookup(key: str) -> str | None:
        value = env.get(key)
        if value is None or value == "":
            value = fallback.get(key)
        if value is None or value == "":
            return None
        return value

    ci = env.get("CI", "").strip().lower() not in {"", "0", "false", "no"}
    base = RunConfig()

    retries_raw = lookup("KONG_UI_RETRIES")
    retries = _as_int("KONG_UI_RETRIES", retries_raw) if retries_raw else (2 if ci else 0)
    if retries < 0:
        raise ValueError(f"KONG_UI_RETRIES must not be negative, got {retries}")

    workers_raw = lookup("KONG_UI_WORKERS")
    workers = _as_int("KONG_UI_WORKERS", workers_raw) if workers_raw else (1 if ci else None)

    expect_raw = lookup("KONG_UI_EXPECT_TIMEOUT_MS")
    action_raw = lookup("KONG_UI_ACTION_TIMEOUT_MS")
    headless_raw = lookup("PLAYWRIGHT_HEADLESS")
    device = lookup("KONG_UI_DEVICE") or base.device

    config = RunConfig(
        base_url=lookup("KONG_MANAGER_URL") or base.base_url,
        workspace=lookup("KONG_WORKSPACE") or base.workspace,
        expect_timeout_ms=(
            _as_int("KONG_UI_EXPECT_TIMEOUT_MS", expect_raw) if expect_raw else base.expect_timeout_ms
        ),
        action_timeout_ms=(
            _as_int("KONG_UI_ACTION_TIMEOUT_MS", action_raw) if action_raw else base.action_timeout_ms
        ),
        ci=ci,
        retries=retries,
        workers=workers,
        execution=_choice("KONG_UI_EXECUTION", lookup("KONG_UI_EXECUTION") or base.execution, EXECUTION_MODES),
        reporter=_choice("KONG_UI_REPORTER", lookup("KONG_UI_REPORTER") or base.reporter, REPORTERS),
        report_dir=lookup("KONG_UI_REPORT_DIR") or base.report_dir,
        trace=_choice("KONG_UI_TRACE", lookup("KONG_UI_TRACE") or base.trace, TRACE_POLICIES),
        output_dir=lookup("KONG_UI_OUTPUT_DIR") or base.output_dir,
        browser=_choice("KONG_UI_BROWSER", lookup("KONG_UI_BROWSER") or base.browser, BROWSERS),
        device=None if device.lower() == "none" else device,
        headless=_as_bool(headless_raw) if headless_raw else base.headless,
    )
    logger.debug(f"Resolved run config: {config}")
    return config


# Loaded once on import; every fixture and the runner read this instance.
settings = load_run_config()
