"""Exceptions raised by SuperMac commands and mapped to exit codes by the CLI."""

from __future__ import annotations

from typing import Sequence, Tuple


class SuperMacError(Exception):
    exit_code = 1

    def __init__(self, message: str, hints: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.hints: Tuple[str, ...] = tuple(hints)


class UsageError(SuperMacError):
    """Unknown category, unknown action or an invalid argument."""


class CommandFailedError(SuperMacError):
    """A delegated OS command returned a failure."""


class MissingToolError(SuperMacError):
    """A helper binary the action cannot work without is not installed."""

    def __init__(self, tool: str, install_hint: str = "") -> None:
        hints = [install_hint] if install_hint else []
        super().__init__(f"{tool} is not installed", hints)
        self.tool = tool
