from __future__ import annotations

import copy
import json
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from junction_bridge.config import Settings  # noqa: E402
from junction_bridge.errors import CommandError  # noqa: E402


SAMPLE_GENESIS = {
    "genesis_time": "2025-01-01T00:00:00.000000000Z",
    "chain_id": "junction",
    "initial_height": 1,
    "app_state": {
        "bank": {"balances": [{"address": "air1abc", "coins": [{"denom": "uamf", "amount": "100000000000"}]}]},
        "gov": {
            "starting_proposal_id": "1",
            "params": {
                "min_deposit": [{"denom": "uamf", "amount": "10000000"}],
                "max_deposit_period": "172800s",
                "voting_period": "172800s",
                "quorum": "0.334000000000000000",
                "expedited_voting_period": "86400s",
                "burn_vote_veto": True,
            },
        },
    },
}

SAMPLE_APP_TOML = """\
minimum-gas-prices = ""

[api]
enable = false
swagger = false
address = "tcp://localhost:1317"

[grpc]
enable = true
"""


def sample_genesis() -> dict:
    return copy.deepcopy(SAMPLE_GENESIS)


class FakeProcess:
    def __init__(self, args: Sequence[str], returncode: int = 0) -> None:
        self.args = list(args)
        self.pid = 4242
        self.returncode: Optional[int] = None
        self._exit = returncode
        self.terminated = False
        self.killed = False

    def poll(self) -> Optional[int]:
        return self.returncode

    def wait(self, timeout: Optional[float] = None) -> int:
        self.returncode = self._exit
        return self._exit

    def terminate(self) -> None:
        self.terminated = True

    def kill(self) -> None:
        self.killed = True


class FakeRunner:
    """Stands in for CommandRunner: records argv, never spawns anything."""

    def __init__(
        self,
        home: Optional[Path] = None,
        outputs: Optional[Dict[Tuple[str, ...], str]] = None,
        known_keys: Sequence[str] = (),
        fail_on: Optional[Tuple[str, ...]] = None,
    ) -> None:
        self.home = home
        self.outputs = outputs or {}
        self.known_keys = set(known_keys)
        self.fail_on = fail_on
        self.calls: List[List[str]] = []
        self.started: List[FakeProcess] = []
        self.stderr_shown: List[List[str]] = []

    def _write_home(self) -> None:
        config_dir = self.home / "config"
        config_dir.mkdir(parents=True, exist_ok=True)
        (config_dir / "genesis.json").write_text(json.dumps(sample_genesis(), indent=2))
        (config_dir / "app.toml").write_text(SAMPLE_APP_TOML)

    def run(self, args: Sequence[str], capture: bool = False) -> subprocess.CompletedProcess:
        argv = list(args)
        self.calls.append(argv)
        if self.fail_on and tuple(argv[: len(self.fail_on)]) == self.fail_on:
            raise CommandError(["junctiond", *argv], 1, "", "boom")
        if argv[0] == "init" and self.home is not None:
            self._write_home()
        stdout = self.outputs.get(tuple(argv[:3]), "")
        return subprocess.CompletedProcess(argv, 0, stdout=stdout, stderr="")

    def capture(self, args: Sequence[str], show_stderr: bool = False) -> str:
        if show_stderr:
            self.stderr_shown.append(list(args))
        return self.run(args, capture=True).stdout

    def succeeds(self, args: Sequence[str]) -> bool:
        argv = list(args)
        self.calls.append(argv)
        return argv[:2] == ["keys", "show"] and argv[2] in self.known_keys

    def start(self, args: Sequence[str]) -> FakeProcess:
        argv = list(args)
        self.calls.append(argv)
        process = FakeProcess(argv)
        self.started.append(process)
        return process

    def wait(self, process: FakeProcess) -> int:
        return process.wait()

    def subcommands(self) -> List[Tuple[str, ...]]:
        return [tuple(call[:2]) for call in self.calls]


def closed_stdin(prompt: str) -> str:
    raise EOFError


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        home_dir=str(tmp_path / "home"),
        junctiond_path="junctiond",
        block_wait_seconds=0,
        poll_interval=0.01,
    )


@pytest.fixture
def fake_runner(settings) -> FakeRunner:
    return FakeRunner(home=settings.home_path)
