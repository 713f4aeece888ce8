from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from rich.console import Console
from rich.status import Status

from .constants import SPINNER_NAME

console = Console()


class Spinner:
    """Show a ``console.status`` spinner beside a blocking call.

    Purely cosmetic: rich redraws it from its own refresh thread and it never
    touches the decorated call's result.
    """

    def __init__(self, message: str, spinner: str = SPINNER_NAME, output: Optional[Console] = None) -> None:
        self.message = message
        self.spinner = spinner
        self.console = output or console
        self._status: Optional[Status] = None

    def start(self) -> "Spinner":
        self._status = self.console.status(f"[bold cyan]{self.message}", spinner=self.spinner)
        self._status.start()
        return self

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"


def countdown(
    seconds: int,
    label: str = "",
    stop: Optional[threading.Event] = None,
    output: Optional[Console] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Count down once per second rendering ``MM:SS``.

    Returns True when ``00:00`` was reached, False when ``stop`` fired first.
    """

    output = output or console
    prefix = f"{label} " if label else ""
    with output.status(f"⏳ {prefix}{format_clock(seconds)}", spinner=SPINNER_NAME) as status:
        for remaining in range(seconds, 0, -1):
            status.update(f"⏳ {prefix}{format_clock(remaining)}")
            if stop is not None:
                if stop.wait(1):
                    output.print(f"⏹️  {prefix}stopped at {format_clock(remaining)}", highlight=False)
                    return False
            else:
                sleep(1)
    output.print(f"⏳ {prefix}{format_clock(0)}", highlight=False)
    return True
