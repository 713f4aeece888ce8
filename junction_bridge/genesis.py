"""Governance timing edits to a freshly initialised node home.

Only ``app_state.gov.params`` is modelled. The rest of the genesis document
is carried through untouched, in its original key order.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .errors import GenesisError, NodeConfigError
from .logging_utils import get_logger

logger = get_logger()

GOV_PARAMS_PATH = ("app_state", "gov", "params")


@dataclass
class GovTiming:
    max_deposit_period: str
    voting_period: str
    expedited_voting_period: str

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "GovTiming":
        values = {}
        for name in cls.__dataclass_fields__:
            if name not in params:
                raise GenesisError(f"{'.'.join(GOV_PARAMS_PATH)}.{name} not found in genesis file")
            values[name] = params[name]
        return cls(**values)

    def apply(self, params: Dict[str, Any]) -> None:
        for name in self.__dataclass_fields__:
            params[name] = getattr(self, name)


class GenesisDocument:
    """A parsed genesis file with typed access to the governance timing."""

    def __init__(self, raw: Dict[str, Any]) -> None:
        self.raw = raw

    @classmethod
    def load(cls, path: Path) -> "GenesisDocument":
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise GenesisError(f"error reading genesis file {path}: {exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GenesisError(f"error parsing genesis file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise GenesisError(f"genesis file {path} is not a JSON object")
        return cls(data)

    def gov_params(self) -> Dict[str, Any]:
        node: Any = self.raw
        walked = []
        for key in GOV_PARAMS_PATH:
            walked.append(key)
            if not isinstance(node, dict) or not isinstance(node.get(key), dict):
                raise GenesisError(f"{'.'.join(walked)} not found in genesis file")
            node = node[key]
        return node

    @property
    def timing(self) -> GovTiming:
        return GovTiming.from_params(self.gov_params())

    def set_timing(self, timing: GovTiming) -> None:
        params = self.gov_params()
        # All three keys must already exist before any is overwritten
        GovTiming.from_params(params)
        timing.apply(params)

    def dumps(self) -> str:
        return json.dumps(self.raw, indent=2, ensure_ascii=False)

    def save(self, path: Path) -> None:
        try:
            path.write_text(self.dumps(), encoding="utf-8")
        except OSError as exc:
            raise GenesisError(f"error writing updated genesis file {path}: {exc}") from exc


def update_genesis_timing(path: Path, timing: GovTiming) -> GovTiming:
    """Rewrite the governance periods in ``path`` and return the previous ones."""

    document = GenesisDocument.load(path)
    previous = document.timing
    document.set_timing(timing)
    document.save(path)
    logger.info(
        "Genesis gov params: max_deposit_period %s -> %s, voting_period %s -> %s, "
        "expedited_voting_period %s -> %s",
        previous.max_deposit_period,
        timing.max_deposit_period,
        previous.voting_period,
        timing.voting_period,
        previous.expedited_voting_period,
        timing.expedited_voting_period,
    )
    return previous


def patch_app_toml(path: Path, minimum_gas_prices: str) -> int:
    """Set minimum gas prices and switch on the API servers and swagger.

    Returns the number of substitutions made.
    """

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise NodeConfigError(f"error reading app.toml file {path}: {exc}") from exc

    replacements = (
        ('minimum-gas-prices = ""', f'minimum-gas-prices = "{minimum_gas_prices}"'),
        ("enable = false", "enable = true"),
        ("swagger = false", "swagger = true"),
    )
    changed = 0
    for old, new in replacements:
        changed += content.count(old)
        content = content.replace(old, new)

    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise NodeConfigError(f"error writing updated app.toml file {path}: {exc}") from exc
    return changed
