from __future__ import annotations

from typing import Optional, Tuple

from .constants import COIN_PATTERN, DEC_COIN_PATTERN, DURATION_PATTERN


def parse_int(token: str) -> Optional[int]:
    if not token or token.startswith("$"):
        return None
    try:
        sanitized = token.replace("_", "")
        return int(sanitized, 10)
    except ValueError:
        return None


def split_coin(value: str) -> Optional[Tuple[int, str]]:
    """Return ``(amount, denom)`` for a coin such as ``100uamf``."""

    match = COIN_PATTERN.match(value.strip())
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def check_coin(value: str, label: str) -> Optional[str]:
    parsed = split_coin(value)
    if parsed is None:
        return f"{label} must look like <integer><denom>, got {value!r}"
    amount, _ = parsed
    if amount <= 0:
        return f"{label} must be greater than zero, got {value!r}"
    return None


def check_dec_coin(value: str, label: str) -> Optional[str]:
    if not DEC_COIN_PATTERN.match(value.strip()):
        return f"{label} must look like <decimal><denom>, got {value!r}"
    return None


def normalise_duration(value: str | int) -> str:
    """Accept ``600`` or ``"600"`` as shorthand for ``"600s"``."""

    text = str(value).strip()
    if parse_int(text) is not None:
        return f"{parse_int(text)}s"
    return text


def check_duration(value: str, label: str) -> Optional[str]:
    match = DURATION_PATTERN.match(value)
    if not match:
        return f"{label} must be a whole number of seconds such as '600s', got {value!r}"
    if int(match.group(1)) <= 0:
        return f"{label} must be longer than zero seconds"
    return None
