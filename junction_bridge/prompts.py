from __future__ import annotations

import os
from typing import Callable, List, Mapping, Optional

from .env_utils import resolve_env_value, split_env_list
from .errors import JunctionBridgeError

InputFunc = Callable[[str], str]


class Prompter:
    """Line-oriented questions with defaults and environment overrides.

    An answer already present in ``env`` is used without asking. A closed
    stdin counts as accepting the default.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None, input_func: InputFunc = input) -> None:
        self.env = dict(os.environ) if env is None else env
        self.input_func = input_func
        self.closed = False

    def _ask(self, question: str) -> str:
        if self.closed:
            return ""
        try:
            return self.input_func(question).strip()
        except EOFError:
            print()
            self.closed = True
            return ""

    def prompt(self, text: str, default: str | None = None, env_name: str | None = None) -> str:
        if env_name:
            value = resolve_env_value(env_name, self.env)
            if value:
                print(f"{text}: {value} (from ${env_name})")
                return value
        suffix = f" [{default}]" if default else ""
        value = self._ask(f"{text}{suffix}: ")
        if not value and default is not None:
            return default
        return value

    def prompt_required(self, text: str, env_name: str | None = None) -> str:
        while True:
            value = self.prompt(text, env_name=env_name)
            if value:
                return value
            if self.closed:
                raise JunctionBridgeError(f"{text} is required but standard input is closed (set ${env_name})")
            print(f"⚠️  {text} is required.")

    def prompt_list(self, text: str, default: List[str], env_name: str | None = None) -> List[str]:
        if env_name:
            values = split_env_list(resolve_env_value(env_name, self.env))
            if values:
                print(f"{text}: {', '.join(values)} (from ${env_name})")
                return values
        answer = self._ask(f"{text} (comma-separated) [{', '.join(default)}]: ")
        values = split_env_list(answer)
        return values or list(default)

    def confirm(self, text: str, default: bool = True) -> bool:
        suffix = "Y/n" if default else "y/N"
        answer = self._ask(f"{text} ({suffix}): ").lower()
        if not answer:
            return default
        return answer.startswith("y")
