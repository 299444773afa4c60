"""Run the Kong Manager journeys with the configured execution policy.

    python -m kong_ui_tests [pytest args...]

Retries, workers, scheduling and the HTML report come from RunConfig
(environment / .env.defaults); anything after the known options is passed
to pytest untouched.
"""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import List, Sequence

import pytest

from kong_ui_tests.config import RunConfig, settings

logger = logging.getLogger(__name__)

JOURNEYS_DIR = Path(__file__).resolve().parent / "journeys"


def build_pytest_args(config: RunConfig, extra: Sequence[str] = ()) -> List[str]:
    """Translate the run configuration into a pytest command line."""
    args = [str(JOURNEYS_DIR)]
    if config.retries > 0:
        args += ["--reruns", str(config.retries)]
    if config.workers:
        args += ["-n", str(config.workers), "--dist", "loadgroup" if config.serial else "load"]
    if config.reporter == "html":
        args += [f"--html={Path(config.report_dir) / 'index.html'}", "--self-contained-html"]
    if config.ci:
        args.append("--strict-markers")
    args.extend(extra)
    return args


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kong-ui-tests",
        description="Drive Kong Manager through a browser and check Service/Route creation.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--print-args",
        action="store_true",
        help="Print the pytest command line and exit without running it",
    )
    options, extra = parser.parse_known_args(argv)

    args = build_pytest_args(settings, extra)
    if options.print_args:
        print("pytest " + shlex.join(args))
        return 0

    logger.info(f"Running against {settings.base_url} (retries={settings.retries}, workers={settings.workers})")
    return int(pytest.main(args))


if __name__ == "__main__":
    sys.exit(main())
