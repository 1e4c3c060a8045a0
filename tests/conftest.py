from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Set, Tuple, Union

import pytest

from supermac import config, formatting, shell
from supermac.shell import CommandResult

Response = Union[CommandResult, Callable[[List[str]], CommandResult]]


@dataclass
class FakeShell:
    """Stand-in for ``supermac.shell.run`` with an in-memory ``defaults`` store."""

    responses: Dict[Tuple[str, ...], Response] = field(default_factory=dict)
    prefs: Dict[Tuple[str, str], str] = field(default_factory=dict)
    tools: Set[str] = field(default_factory=set)
    calls: List[List[str]] = field(default_factory=list)

    def on(self, *argv: str, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.responses[argv] = CommandResult(list(argv), returncode, stdout, stderr)

    def handle(self, *argv: str, handler: Callable[[List[str]], CommandResult]) -> None:
        self.responses[argv] = handler

    def run(self, argv, **kwargs) -> CommandResult:
        args = [str(part) for part in argv]
        self.calls.append(args)
        if args[0] == "defaults" and args[1] in ("read", "write", "delete"):
            return self._defaults(args)
        response = self.responses.get(tuple(args))
        if response is None:
            return CommandResult(args, 0, "", "")
        if callable(response):
            return response(args)
        return response

    def ran(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == list(prefix) for call in self.calls)

    def _defaults(self, args: List[str]) -> CommandResult:
        verb, domain = args[1], args[2]
        if verb == "read":
            value = self.prefs.get((domain, args[3]))
            if value is None:
                return CommandResult(args, 1, "", "does not exist")
            return CommandResult(args, 0, value + "\n", "")
        if verb == "write":
            key, kind, value = args[3], args[4], args[5]
            if kind == "-bool":
                value = "1" if value == "true" else "0"
            self.prefs[(domain, key)] = value
            return CommandResult(args, 0, "", "")
        if len(args) > 3:
            return CommandResult(args, 0 if self.prefs.pop((domain, args[3]), None) is not None else 1, "", "")
        for pref in [pref for pref in self.prefs if pref[0] == domain]:
            del self.prefs[pref]
        return CommandResult(args, 0, "", "")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    monkeypatch.delenv("SUPERMAC_DEBUG", raising=False)
    config.set_settings(config.Settings(color=False))
    formatting.configure(color=False)
    yield
    config.set_settings(None)


@pytest.fixture
def fake_shell(monkeypatch) -> FakeShell:
    fake = FakeShell()
    monkeypatch.setattr(shell, "run", fake.run)
    monkeypatch.setattr(shell, "command_exists", lambda name: name in fake.tools)
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    return fake
