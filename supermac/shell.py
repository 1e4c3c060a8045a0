"""Thin wrappers around the macOS command line tools SuperMac delegates to."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import shutil
import subprocess
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


@dataclass
class CommandResult:
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run(
    argv: Sequence[str],
    *,
    capture: bool = True,
    input_text: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    cwd: Optional[str] = None,
) -> CommandResult:
    """Run a command and return its result; a missing binary yields exit code 127."""
    args = [str(part) for part in argv]
    logger.debug("Running: %s", " ".join(args))
    try:
        completed = subprocess.run(
            args,
            text=True,
            capture_output=capture,
            input=input_text,
            timeout=timeout,
            cwd=cwd,
        )
    except FileNotFoundError:
        logger.debug("Command not found: %s", args[0])
        return CommandResult(args, 127, "", f"{args[0]}: command not found")
    except subprocess.TimeoutExpired:
        logger.debug("Command timed out after %ss: %s", timeout, args[0])
        return CommandResult(args, 124, "", f"{args[0]}: timed out")
    result = CommandResult(args, completed.returncode, completed.stdout or "", completed.stderr or "")
    logger.debug("Exit code %s: %s", result.returncode, args[0])
    return result


def output(argv: Sequence[str], timeout: Optional[float] = DEFAULT_TIMEOUT) -> str:
    """Stripped stdout of a successful command, empty string otherwise."""
    result = run(argv, timeout=timeout)
    return result.stdout.strip() if result.ok else ""


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def osascript(script: str) -> CommandResult:
    return run(["osascript", "-e", script])


def sudo(argv: Sequence[str]) -> CommandResult:
    return run(["sudo", *argv], capture=False, timeout=None)


def can_sudo_without_password() -> bool:
    return run(["sudo", "-n", "true"], timeout=5).ok


def killall(name: str, signal: Optional[str] = None) -> bool:
    argv = ["killall"]
    if signal:
        argv.append(f"-{signal}")
    argv.append(name)
    return run(argv).ok


def open_path(target: str, *flags: str) -> CommandResult:
    return run(["open", *flags, target])


def copy_to_clipboard(text: str) -> bool:
    """Copy text with pbcopy; returns False when pbcopy is unavailable."""
    if not command_exists("pbcopy"):
        return False
    return run(["pbcopy"], input_text=text).ok
