from __future__ import annotations

import os
import signal
import subprocess
import sys
from pathlib import Path
from types import FrameType
from typing import Callable, List, Optional

import psutil

from .constants import TERMINATE_GRACE_SECONDS
from .logging_utils import get_logger
from .session import SessionStore

logger = get_logger()


def terminate_process(process: subprocess.Popen, grace: float = TERMINATE_GRACE_SECONDS) -> Optional[int]:
    """SIGTERM, wait ``grace`` seconds, then SIGKILL if still alive."""

    if process.poll() is not None:
        return process.returncode
    process.terminate()
    try:
        return process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("Node pid %s ignored SIGTERM; killing it.", process.pid)
        process.kill()
        return process.wait()


def kill_named_processes(name: str, exclude: Optional[List[int]] = None) -> List[int]:
    """Best-effort kill of every process named ``name``; returns the pids hit."""

    skip = set(exclude or [])
    skip.add(os.getpid())
    killed: List[int] = []
    for proc in psutil.process_iter(["pid", "name"]):
        try:
            if proc.info["name"] != name or proc.info["pid"] in skip:
                continue
            proc.kill()
            killed.append(proc.info["pid"])
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return killed


class RunningSession:
    """Owns the spawned node and the cleanup that runs on Ctrl+C.

    The interrupt handler stops the node (gracefully, then forcefully),
    sweeps any other node processes with the same binary name, deletes the
    session state and exits with status 130.
    """

    def __init__(
        self,
        store: SessionStore,
        binary: str,
        grace: float = TERMINATE_GRACE_SECONDS,
        exit_func: Callable[[int], None] = sys.exit,
    ) -> None:
        self.store = store
        self.binary_name = Path(binary).name
        self.grace = grace
        self.exit_func = exit_func
        self.process: Optional[subprocess.Popen] = None
        self._previous_handler = None

    def attach(self, process: subprocess.Popen) -> subprocess.Popen:
        self.process = process
        return process

    def cleanup(self) -> None:
        if self.process is not None:
            print(f"\n🛑 Stopping node (pid {self.process.pid})...")
            try:
                terminate_process(self.process, self.grace)
            except OSError as exc:
                logger.warning("Could not stop node pid %s: %s", self.process.pid, exc)
        killed = kill_named_processes(self.binary_name)
        if killed:
            logger.info("Killed leftover %s processes: %s", self.binary_name, ", ".join(map(str, killed)))
        self.store.clear()
        print("🧹 Session state cleared.")

    def handle_interrupt(self, signum: int, frame: Optional[FrameType]) -> None:
        print(f"\n⚠️  Received signal {signum}, cleaning up...")
        self.cleanup()
        self.exit_func(130)

    def install(self) -> "RunningSession":
        self._previous_handler = signal.signal(signal.SIGINT, self.handle_interrupt)
        return self

    def uninstall(self) -> None:
        if self._previous_handler is not None:
            signal.signal(signal.SIGINT, self._previous_handler)
            self._previous_handler = None

    def __enter__(self) -> "RunningSession":
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.uninstall()
