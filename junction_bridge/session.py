"""Session state carried from the setup run to the submit run.

The state file is the only thing the two runs share. ``phase`` decides what
the next run does: a missing, unreadable or unrecognised file means a fresh
setup, never an error.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import STATE_FILE
from .errors import SessionStateError
from .logging_utils import get_logger
from .proposal import ProposalFields

logger = get_logger()


class Phase(str, Enum):
    SETUP = "setup"
    SUBMIT = "submit"


@dataclass
class SessionState:
    phase: Phase = Phase.SETUP
    proposal: ProposalFields = field(default_factory=ProposalFields)
    ipfs_cid: str = ""
    created: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"phase": self.phase.value}
        data.update(self.proposal.to_state())
        data["ipfs_cid"] = self.ipfs_cid
        data["created"] = self.created
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        return cls(
            phase=Phase(data["phase"]),
            proposal=ProposalFields.from_state(data),
            ipfs_cid=str(data.get("ipfs_cid", "")),
            created=bool(data.get("created", False)),
        )


def advance(state: SessionState, proposal: Optional[ProposalFields] = None, ipfs_cid: str = "") -> SessionState:
    """setup -> submit once the proposal files exist; submit is terminal."""

    if state.phase is not Phase.SETUP:
        raise SessionStateError(f"cannot advance a session already in phase {state.phase.value!r}")
    return SessionState(
        phase=Phase.SUBMIT,
        proposal=proposal or state.proposal,
        ipfs_cid=ipfs_cid or state.ipfs_cid,
        created=True,
    )


class SessionStore:
    def __init__(self, path: Path = STATE_FILE) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> SessionState:
        if not self.path.exists():
            return SessionState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return SessionState.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable session state %s (%s); starting fresh.", self.path, exc)
            return SessionState()

    def save(self, state: SessionState) -> None:
        try:
            self.path.write_text(json.dumps(state.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise SessionStateError(f"Error writing {self.path}: {exc}") from exc

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("Could not delete session state %s: %s", self.path, exc)
