"""Argument validation shared by the category handlers."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from .errors import UsageError

ON_WORDS = ("on", "enable", "true", "1", "yes")
OFF_WORDS = ("off", "disable", "false", "0", "no")


def arg(args: Sequence[str], index: int, default: Optional[str] = None) -> Optional[str]:
    return args[index] if len(args) > index else default


def require(args: Sequence[str], index: int, name: str, usage: str) -> str:
    value = arg(args, index)
    if value is None or value == "":
        raise UsageError(f"{name} required", [f"Usage: {usage}"])
    return value


def int_in_range(value: str, name: str, low: int, high: int) -> int:
    """Parse a non-negative integer and check ``low <= value <= high``."""
    if not value.isdigit() or not low <= int(value) <= high:
        raise UsageError(f"{name} must be between {low} and {high}")
    return int(value)


def percentage(value: str, name: str) -> int:
    return int_in_range(value, name, 0, 100)


def port(value: str) -> int:
    return int_in_range(value, "Port", 1, 65535)


def switch(value: Optional[str], usage: str) -> bool:
    """``on``/``off`` style words to a boolean."""
    word = (value or "").lower()
    if word in ON_WORDS:
        return True
    if word in OFF_WORDS:
        return False
    raise UsageError(f"Invalid option: {value}" if value else "on or off required", [f"Usage: {usage}"])


def choice(value: Optional[str], options: Dict[str, str], name: str, usage: str) -> str:
    """Resolve ``value`` through an alias map to its canonical option."""
    key = (value or "").lower()
    if key not in options:
        raise UsageError(
            f"Invalid {name}: {value}" if value else f"{name} required",
            [f"Usage: {usage}"],
        )
    return options[key]
