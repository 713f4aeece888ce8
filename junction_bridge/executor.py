from __future__ import annotations

import datetime
import shlex
import subprocess
from pathlib import Path
from typing import Dict, Optional, Sequence, TextIO

from .errors import CommandError
from .logging_utils import log_section


class CommandRunner:
    """Run node binary subcommands and record each one in the run log.

    ``stream`` hands the child the parent's terminal so interactive
    prompts (keyring passphrases) and progress stay visible. ``capture``
    collects stdout/stderr for parsing. Any failure raises ``CommandError``.
    """

    def __init__(
        self,
        binary: str,
        log: Optional[TextIO] = None,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.binary = binary
        self.log = log
        self.env = env
        self.cwd = cwd

    def argv(self, args: Sequence[str]) -> list[str]:
        return [self.binary, *args]

    def _begin(self, argv: Sequence[str]) -> None:
        if self.log is None:
            return
        self.log.write("\n" + "-" * 80 + "\n")
        self.log.write(f"Timestamp: {datetime.datetime.now(datetime.timezone.utc).isoformat()}\n")
        self.log.write(f"Working directory: {self.cwd or Path.cwd()}\n")
        self.log.write(f"Command: {shlex.join(argv)}\n")
        self.log.flush()

    def _finish(self, returncode: int, stdout: Optional[str], stderr: Optional[str]) -> None:
        if self.log is None:
            return
        self.log.write(f"Exit code: {returncode}\n")
        if stdout is not None or stderr is not None:
            self.log.write("STDOUT:\n")
            self.log.write(stdout if stdout else "<empty>\n")
            self.log.write("STDERR:\n")
            self.log.write(stderr if stderr else "<empty>\n")
        self.log.flush()

    def run(
        self, args: Sequence[str], capture: bool = False, show_stderr: bool = False
    ) -> subprocess.CompletedProcess:
        argv = self.argv(args)
        print(f"→ {shlex.join(argv)}")
        self._begin(argv)
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture and not show_stderr else None,
                text=True,
                env=self.env,
                cwd=str(self.cwd) if self.cwd else None,
                check=False,
            )
        except OSError as exc:
            log_section(self.log, "Execution failed", repr(exc))
            raise CommandError(argv, None, reason=str(exc)) from exc

        self._finish(result.returncode, result.stdout, result.stderr)
        if result.returncode != 0:
            raise CommandError(argv, result.returncode, result.stdout or "", result.stderr or "")
        return result

    def capture(self, args: Sequence[str], show_stderr: bool = False) -> str:
        """Return stdout; ``show_stderr`` leaves stderr (keyring prompts) on the terminal."""

        return self.run(args, capture=True, show_stderr=show_stderr).stdout or ""

    def succeeds(self, args: Sequence[str]) -> bool:
        """Run quietly and report whether the command exited zero."""

        argv = self.argv(args)
        self._begin(argv)
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=self.env,
                cwd=str(self.cwd) if self.cwd else None,
                check=False,
            )
        except OSError as exc:
            log_section(self.log, "Execution failed", repr(exc))
            return False
        self._finish(result.returncode, None, None)
        return result.returncode == 0

    def start(self, args: Sequence[str]) -> subprocess.Popen:
        """Spawn a long-running child attached to this terminal."""

        argv = self.argv(args)
        print(f"→ {shlex.join(argv)}")
        self._begin(argv)
        try:
            return subprocess.Popen(
                argv,
                env=self.env,
                cwd=str(self.cwd) if self.cwd else None,
            )
        except OSError as exc:
            log_section(self.log, "Execution failed", repr(exc))
            raise CommandError(argv, None, reason=str(exc)) from exc

    def wait(self, process: subprocess.Popen) -> int:
        returncode = process.wait()
        self._finish(returncode, None, None)
        if returncode != 0:
            raise CommandError(process.args, returncode)
        return returncode
