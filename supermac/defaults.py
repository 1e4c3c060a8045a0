"""Typed access to the macOS ``defaults`` preference store."""

from __future__ import annotations

import logging
from typing import Optional, Union

from . import shell
from .errors import CommandFailedError
from .parsers import parse_bool

logger = logging.getLogger(__name__)

GLOBAL_DOMAIN = "NSGlobalDomain"

Value = Union[bool, int, float, str]


def read(domain: str, key: str) -> Optional[str]:
    """Raw value of ``domain key``, or None when the key is not set."""
    result = shell.run(["defaults", "read", domain, key])
    if not result.ok:
        logger.debug("defaults %s %s is unset", domain, key)
        return None
    return result.stdout.strip()


def read_bool(domain: str, key: str, default: bool = False) -> bool:
    return parse_bool(read(domain, key), default)


def read_int(domain: str, key: str, default: int) -> int:
    raw = read(domain, key)
    try:
        return int(float(raw)) if raw is not None else default
    except ValueError:
        return default


def write(domain: str, key: str, value: Value) -> None:
    if isinstance(value, bool):
        typed = ["-bool", "true" if value else "false"]
    elif isinstance(value, int):
        typed = ["-int", str(value)]
    elif isinstance(value, float):
        typed = ["-float", str(value)]
    else:
        typed = ["-string", value]
    logger.debug("defaults write %s %s %s", domain, key, " ".join(typed))
    result = shell.run(["defaults", "write", domain, key, *typed])
    if not result.ok:
        raise CommandFailedError(f"Failed to write {domain} {key}", [result.stderr.strip()] if result.stderr.strip() else [])


def delete(domain: str, key: Optional[str] = None) -> bool:
    """Remove a key, or the whole domain; False when there was nothing to delete."""
    argv = ["defaults", "delete", domain]
    if key is not None:
        argv.append(key)
    return shell.run(argv).ok
