from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import dotenv_values

PLACEHOLDER_MARKERS = ("YOUR", "REPLACE")


def parse_env_file(path: Path, env: Dict[str, str]) -> None:
    """Load KEY=VALUE pairs from a .env-style file into ``env``.

    Keys already present in ``env`` win, so exported shell variables keep
    precedence over the file. Keys without a value are ignored.
    """

    if not path.exists():
        return

    for key, value in dotenv_values(path).items():
        if value is None or key in env:
            continue
        env[key] = value


def is_placeholder(value: str) -> bool:
    """True for template values such as ``<cid>`` or ``YOUR_CONTRACT``."""

    stripped = value.strip()
    if stripped.startswith("<") and stripped.endswith(">"):
        return True
    return stripped.isupper() and any(marker in stripped for marker in PLACEHOLDER_MARKERS)


def resolve_env_value(name: str, env: Mapping[str, str]) -> str | None:
    value = env.get(name)
    if value and not is_placeholder(value):
        return value
    return None


def split_env_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated env value, trimming each entry and keeping order.

    Only a wholly blank value yields an empty list; inner empty entries are
    kept so the operator sees exactly what was supplied.
    """

    if raw is None or not raw.strip():
        return []
    return [item.strip() for item in raw.split(",")]


def current_env(extra_file: Optional[Path] = None) -> Dict[str, str]:
    env: Dict[str, str] = dict(os.environ)
    if extra_file is not None:
        parse_env_file(extra_file, env)
    return env
