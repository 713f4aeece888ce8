from __future__ import annotations

from .constants import DEFAULT_ENV_FILE, STATE_FILE
from .config import Settings, load_settings
from .errors import JunctionBridgeError
from .executor import CommandRunner
from .workflow import run_session
