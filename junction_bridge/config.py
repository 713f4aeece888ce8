"""Settings for the governance test runner.

Values are merged from built-in defaults, an optional YAML file, an optional
``.env`` file, the process environment and finally CLI overrides. A config
file that cannot be read is reported and skipped; it never stops a run.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from .constants import CONFIG_SEARCH_PATHS, DEFAULT_ENV_FILE, DEFAULT_LOG_FILE
from .env_utils import parse_env_file, resolve_env_value
from .errors import ConfigError
from .limits import check_coin, check_dec_coin, check_duration, normalise_duration
from .logging_utils import get_logger

logger = get_logger()


@dataclass
class Settings:
    moniker: str = "junction-testing"
    chain_id: str = "junction"
    denom: str = "uamf"
    key_name: str = "test1"
    amount: str = "100000000000uamf"
    validator_stake: str = "10000000000uamf"
    gas_prices: str = "0.0025uamf"
    minimum_gas_prices: str = "0.00025uamf"
    junctiond_path: str = "./build/junctiond"
    home_dir: str = "$HOME/.junction"
    genesis_path: Optional[str] = None
    rest_endpoint: str = "http://localhost:1317"
    max_deposit_period: str = "600s"
    voting_period: str = "660s"
    expedited_voting_period: str = "300s"
    proposer_key: Optional[str] = None
    proposal_deposit: str = "51000000uamf"
    proposal_fees: str = "50uamf"
    block_wait_seconds: int = 10
    poll_interval: float = 2.0
    log_file: str = str(DEFAULT_LOG_FILE)

    @property
    def home_path(self) -> Path:
        return Path(os.path.expandvars(self.home_dir)).expanduser()

    @property
    def genesis_file(self) -> Path:
        if self.genesis_path:
            return Path(os.path.expandvars(self.genesis_path)).expanduser()
        return self.home_path / "config" / "genesis.json"

    @property
    def app_toml_file(self) -> Path:
        return self.home_path / "config" / "app.toml"

    @property
    def binary(self) -> str:
        return os.path.expandvars(os.path.expanduser(self.junctiond_path))

    @property
    def signer(self) -> str:
        return self.proposer_key or self.key_name

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Env var names for every settings field
FIELD_ENV: Dict[str, str] = {
    "moniker": "MONIKER",
    "chain_id": "CHAIN_ID",
    "denom": "DENOM",
    "key_name": "KEY_NAME",
    "amount": "AMOUNT",
    "validator_stake": "VALIDATOR_STAKE",
    "gas_prices": "GAS_PRICES",
    "minimum_gas_prices": "MINIMUM_GAS_PRICES",
    "junctiond_path": "JUNCTIOND_PATH",
    "home_dir": "HOME_DIR",
    "genesis_path": "GENESIS_PATH",
    "rest_endpoint": "REST_ENDPOINT",
    "max_deposit_period": "MAX_DEPOSIT_PERIOD",
    "voting_period": "VOTING_PERIOD",
    "expedited_voting_period": "EXPEDITED_VOTING_PERIOD",
    "proposer_key": "PROPOSER_KEY",
    "proposal_deposit": "PROPOSAL_DEPOSIT",
    "proposal_fees": "PROPOSAL_FEES",
    "block_wait_seconds": "BLOCK_WAIT_SECONDS",
    "poll_interval": "POLL_INTERVAL",
    "log_file": "LOG_FILE",
}

_INT_FIELDS = {"block_wait_seconds"}
_FLOAT_FIELDS = {"poll_interval"}
_DURATION_FIELDS = ("max_deposit_period", "voting_period", "expedited_voting_period")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Error reading config file %s: %s. Using defaults.", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping. Using defaults.", path)
        return {}
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))
    return {key: value for key, value in data.items() if key in known}


def find_config_file(candidates: Iterable[Path] = CONFIG_SEARCH_PATHS) -> Optional[Path]:
    for candidate in candidates:
        path = candidate.expanduser()
        if path.is_file():
            return path
    return None


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None
    try:
        if name in _INT_FIELDS:
            return int(value)
        if name in _FLOAT_FIELDS:
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{FIELD_ENV[name]} must be numeric, got {value!r}") from exc
    if name in _DURATION_FIELDS:
        return normalise_duration(value)
    return str(value)


def validate_settings(settings: Settings) -> None:
    problems = [
        check_coin(settings.amount, "AMOUNT"),
        check_coin(settings.validator_stake, "VALIDATOR_STAKE"),
        check_coin(settings.proposal_deposit, "PROPOSAL_DEPOSIT"),
        check_coin(settings.proposal_fees, "PROPOSAL_FEES"),
        check_dec_coin(settings.gas_prices, "GAS_PRICES"),
        check_dec_coin(settings.minimum_gas_prices, "MINIMUM_GAS_PRICES"),
    ]
    problems.extend(check_duration(getattr(settings, name), FIELD_ENV[name]) for name in _DURATION_FIELDS)
    if settings.block_wait_seconds < 0:
        problems.append("BLOCK_WAIT_SECONDS cannot be negative")
    if settings.poll_interval <= 0:
        problems.append("POLL_INTERVAL must be greater than zero")
    problems = [problem for problem in problems if problem]
    if problems:
        raise ConfigError("; ".join(problems))


def load_settings(
    config_path: Optional[Path] = None,
    env_file: Optional[Path] = DEFAULT_ENV_FILE,
    overrides: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build validated settings from every configuration source."""

    merged: Dict[str, Any] = {}

    yaml_path = config_path or find_config_file()
    if yaml_path is not None:
        if config_path is not None and not config_path.exists():
            logger.warning("Config file %s not found. Using defaults.", config_path)
        else:
            merged.update(_read_yaml(yaml_path))

    environment: Dict[str, str] = dict(os.environ if env is None else env)
    if env_file is not None:
        parse_env_file(env_file, environment)

    for name, env_name in FIELD_ENV.items():
        value = resolve_env_value(env_name, environment)
        if value is not None:
            merged[name] = value

    for name, value in (overrides or {}).items():
        if value is not None:
            merged[name] = value

    settings = Settings(**{name: _coerce(name, value) for name, value in merged.items()})
    validate_settings(settings)
    return settings
