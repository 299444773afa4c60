"""Trace capture policy, matching Playwright's `trace` option values."""
from __future__ import annotations

import re
from pathlib import Path


def should_record(policy: str, execution_count: int) -> bool:
    """Whether to record a trace on this attempt (1 = first run, 2 = first retry)."""
    if policy in ("on", "retain-on-failure"):
        return True
    if policy == "on-first-retry":
        return execution_count == 2
    return False


def should_keep(policy: str, failed: bool) -> bool:
    """Whether a recorded trace is written out or discarded."""
    if policy == "retain-on-failure":
        return failed
    return policy != "off"


def trace_path(output_dir: str, nodeid: str, execution_count: int) -> Path:
    """`test-results/<sanitised node id>[-retryN]/trace.zip`."""
    slug = re.sub(r"[^A-Za-z0-9_.-]+", "-", nodeid).strip("-")
    if execution_count > 1:
        slug = f"{slug}-retry{execution_count - 1}"
    return Path(output_dir) / slug / "trace.zip"
