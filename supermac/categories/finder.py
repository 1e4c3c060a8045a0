"""Finder: hidden files, restart, reveal and status."""

from __future__ import annotations

import logging
import os
from typing import Sequence

from .. import defaults, shell
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, UsageError
from ..formatting import field, header, info, success, warning
from ..polling import wait_for
from ..system_state import is_running
from ..validation import require

logger = logging.getLogger(__name__)

DOMAIN = "com.apple.finder"
HIDDEN_KEY = "AppleShowAllFiles"
RESTART_ATTEMPTS = 5
VIEW_STYLES = {
    "icnv": "Icon View",
    "Nlsv": "List View",
    "clmv": "Column View",
    "Flwv": "Gallery View",
}


def hidden_files_visible() -> bool:
    return defaults.read_bool(DOMAIN, HIDDEN_KEY)


def set_hidden_files(visible: bool) -> None:
    defaults.write(DOMAIN, HIDDEN_KEY, "TRUE" if visible else "FALSE")
    restart_finder(quiet=True)


def restart_finder(quiet: bool = False) -> None:
    if not is_running("Finder"):
        if not quiet:
            info("Finder is not running, starting it...")
        shell.open_path("Finder", "-a")
        return

    if not shell.killall("Finder"):
        raise CommandFailedError("Failed to restart Finder", ["Try restarting Finder from Activity Monitor"])

    result = wait_for(lambda: is_running("Finder"), attempts=RESTART_ATTEMPTS)
    if result.timed_out:
        logger.debug("Finder did not relaunch after %d checks, opening it", result.attempts)
        shell.open_path("Finder", "-a")


def restart(args: Sequence[str]) -> None:
    info("Restarting Finder...")
    restart_finder()
    success("Finder restarted")


def show_hidden(args: Sequence[str]) -> None:
    if hidden_files_visible():
        info("Hidden files are already visible")
        return
    set_hidden_files(True)
    success("Hidden files are now visible")
    info("Press Cmd+Shift+. in Finder to toggle them on the fly")


def hide_hidden(args: Sequence[str]) -> None:
    if not hidden_files_visible():
        info("Hidden files are already hidden")
        return
    set_hidden_files(False)
    success("Hidden files are now hidden")


def toggle_hidden(args: Sequence[str]) -> None:
    visible = not hidden_files_visible()
    set_hidden_files(visible)
    success(f"Hidden files are now {'visible' if visible else 'hidden'}")


def reveal(args: Sequence[str]) -> None:
    path = os.path.expanduser(require(args, 0, "Path", "mac finder reveal <path>"))
    if not os.path.exists(path):
        raise UsageError(f"Path does not exist: {path}")
    result = shell.open_path(path, "-R")
    if not result.ok:
        raise CommandFailedError(f"Failed to reveal {path} in Finder")
    success(f"Revealed in Finder: {path}")


def status(args: Sequence[str]) -> None:
    header("📁 Finder Status")
    running = is_running("Finder")
    field("Finder", "running" if running else "not running")
    field("Hidden files", "visible" if hidden_files_visible() else "hidden")
    extensions = defaults.read_bool(defaults.GLOBAL_DOMAIN, "AppleShowAllExtensions")
    field("File extensions", "shown" if extensions else "hidden")
    view = defaults.read(DOMAIN, "FXPreferredViewStyle")
    field("Default view", VIEW_STYLES.get(view or "", view or "unknown"))
    if not running:
        warning("Finder is not running; use 'mac finder restart' to start it")


TABLE = CommandTable(
    "finder",
    [
        Command("restart", restart, "Restart Finder", keywords=("finder",)),
        Command("show-hidden", show_hidden, "Show hidden files", keywords=("hidden", "show")),
        Command("hide-hidden", hide_hidden, "Hide hidden files", keywords=("hidden", "hide")),
        Command("toggle-hidden", toggle_hidden, "Toggle hidden files", keywords=("hidden", "show", "hide")),
        Command("reveal", reveal, "Reveal a file or folder in Finder", "<path>", keywords=("open",)),
        Command("status", status, "Show Finder settings", keywords=("info",)),
    ],
    examples=[
        "mac finder show-hidden",
        "mac finder reveal ~/Downloads",
        "mac rf",
    ],
    tips=[
        "Cmd+Shift+. toggles hidden files inside a Finder window",
        "Restart Finder if it becomes unresponsive",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
