from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Final, Optional, TextIO

_LOGGER_NAME: Final[str] = "junction.bridge"


def get_logger() -> logging.Logger:
    """Return the shared logger for warnings and diagnostics."""

    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(message)s", "%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def log_section(log_handle: Optional[TextIO], header: str, content: str | None = None) -> None:
    if log_handle is not None:
        log_handle.write(f"{header}\n")
        if content:
            log_handle.write(f"{content}\n")
        log_handle.flush()

    # Mirror the most important log events to stdout so the user sees progress
    print(header)
    if content:
        print(content)


def open_run_log(path: Path) -> TextIO:
    """Open the run log for appending and stamp the start of this run."""

    handle = path.open("a", encoding="utf-8")
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    handle.write("=" * 80 + "\n")
    handle.write(f"Run started at {timestamp}\n")
    handle.write(f"Working directory: {Path.cwd()}\n")
    handle.flush()
    return handle
