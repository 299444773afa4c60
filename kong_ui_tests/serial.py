"""Serial scenario groups.

Tests marked `serial` run in file order and share state through Kong
Manager itself. Once one of them fails for good (after any reruns), the
rest of its group is skipped instead of failing on missing data.
"""
from __future__ import annotations

import logging
from typing import Dict

import pytest

logger = logging.getLogger(__name__)

MARKER = "serial"

failed_groups_key = pytest.StashKey[Dict[str, str]]()


def group_of(nodeid: str) -> str:
    """The enclosing class (or module) of a test node id."""
    return nodeid.rsplit("::", 1)[0]


def _failures(config: pytest.Config) -> Dict[str, str]:
    return config.stash.setdefault(failed_groups_key, {})


def record_report(config: pytest.Config, report: pytest.TestReport) -> None:
    """Remember the first final failure of each serial group.

    Reruns arrive with outcome "rerun" and are ignored; only the last
    attempt's failure counts.
    """
    if MARKER not in report.keywords or not report.failed:
        return
    failures = _failures(config)
    group = group_of(report.nodeid)
    if group not in failures:
        failures[group] = report.nodeid
        logger.info(f"Serial group {group} stopped at {report.nodeid}")


def skip_if_group_failed(item: pytest.Item) -> None:
    if item.get_closest_marker(MARKER) is None:
        return
    failed = _failures(item.config).get(group_of(item.nodeid))
    if failed is not None:
        pytest.skip(f"previous serial test failed: {failed}")


class SerialGroups:
    """Plugin object wiring the two functions above into pytest's hooks."""

    def __init__(self, config: pytest.Config) -> None:
        self.config = config

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        record_report(self.config, report)

    def pytest_runtest_setup(self, item: pytest.Item) -> None:
        skip_if_group_failed(item)
