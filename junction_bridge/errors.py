from __future__ import annotations

from typing import Optional, Sequence


class JunctionBridgeError(Exception):
    """Base class for failures that abort the current run."""


class ConfigError(JunctionBridgeError):
    """Raised when a configured value cannot be valid."""


class CommandError(JunctionBridgeError):
    """Raised when the node binary exits non-zero or cannot be spawned."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
        reason: Optional[str] = None,
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        command = " ".join(self.argv)
        if reason:
            message = f"{command}: {reason}"
        else:
            message = f"{command} exited with code {returncode}"
            detail = (stderr or "").strip()
            if detail:
                message += f": {detail.splitlines()[-1]}"
        super().__init__(message)


class GenesisError(JunctionBridgeError):
    """Raised when the genesis document cannot be read or lacks a governance field."""


class NodeConfigError(JunctionBridgeError):
    """Raised when app.toml cannot be patched."""


class ProposalError(JunctionBridgeError):
    """Raised when the proposal or its metadata cannot be produced."""


class InvalidVoteOption(JunctionBridgeError):
    """Raised for a vote option the chain would not accept."""


class SessionStateError(JunctionBridgeError):
    """Raised when the session state file cannot be written."""


__all__ = [
    "JunctionBridgeError",
    "ConfigError",
    "CommandError",
    "GenesisError",
    "NodeConfigError",
    "ProposalError",
    "InvalidVoteOption",
    "SessionStateError",
]
