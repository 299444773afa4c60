"""Read run defaults from the repository's .env.defaults file.

The file is the catalog of every knob the suite understands. Environment
variables always win over it; it only fills in what the shell leaves unset.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict


def _parse_env_file(path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        values[key.strip()] = value
    return values


@lru_cache(maxsize=1)
def load_env_defaults() -> Dict[str, str]:
    """Load `.env.defaults` from the repo root, then overlay a local `.env`."""
    repo_root = Path(__file__).resolve().parents[1]
    merged: Dict[str, str] = {}
    for name in (".env.defaults", ".env"):
        path = repo_root / name
        if path.exists():
            merged.update(_parse_env_file(path))
    return merged
