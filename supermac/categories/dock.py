"""Dock: position, autohide, size, magnification and app management."""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Optional, Sequence

from .. import defaults, shell
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, UsageError
from ..formatting import confirm, field, header, info, success, warning
from ..validation import arg, choice, require, switch

logger = logging.getLogger(__name__)

DOMAIN = "com.apple.dock"
POSITIONS = {"left": "left", "l": "left", "bottom": "bottom", "b": "bottom", "right": "right", "r": "right"}
SIZES = {"small": "small", "s": "small", "medium": "medium", "m": "medium", "large": "large", "l": "large"}
SIZE_PIXELS = {"small": 32, "medium": 64, "large": 96}
MAGNIFIED_SIZE = 128
APP_FOLDERS = (Path("/Applications"), Path("/System/Applications"))
DOCKUTIL_HINT = "Install dockutil with: brew install dockutil"


def size_name(tile_size: int) -> str:
    if tile_size <= 40:
        return "small"
    if tile_size <= 80:
        return "medium"
    return "large"


def restart_dock() -> None:
    if not shell.killall("Dock"):
        raise CommandFailedError("Failed to restart the Dock")
    time.sleep(2)


def find_app(name: str) -> Optional[Path]:
    """Locate an application bundle by name, case-insensitively."""
    bundle = name if name.endswith(".app") else f"{name}.app"
    for folder in APP_FOLDERS:
        candidate = folder / bundle
        if candidate.exists():
            return candidate
    wanted = bundle.lower()
    for folder in APP_FOLDERS:
        if not folder.is_dir():
            continue
        for candidate in list(folder.glob("*.app")) + list(folder.glob("*/*.app")):
            if candidate.name.lower() == wanted:
                return candidate
    return None


def position(args: Sequence[str]) -> None:
    where = choice(arg(args, 0), POSITIONS, "position", "mac dock position <left|bottom|right>")
    if defaults.read(DOMAIN, "orientation") == where:
        info(f"Dock is already on the {where}")
        return
    defaults.write(DOMAIN, "orientation", where)
    restart_dock()
    success(f"Dock moved to the {where}")


def autohide(args: Sequence[str]) -> None:
    enabled = switch(arg(args, 0), "mac dock autohide <on|off>")
    if defaults.read_bool(DOMAIN, "autohide") == enabled:
        info(f"Dock autohide is already {'on' if enabled else 'off'}")
        return
    defaults.write(DOMAIN, "autohide", enabled)
    restart_dock()
    success(f"Dock autohide {'enabled' if enabled else 'disabled'}")


def size(args: Sequence[str]) -> None:
    name = choice(arg(args, 0), SIZES, "size", "mac dock size <small|medium|large>")
    defaults.write(DOMAIN, "tilesize", SIZE_PIXELS[name])
    restart_dock()
    success(f"Dock size set to {name} ({SIZE_PIXELS[name]}px)")


def magnification(args: Sequence[str]) -> None:
    enabled = switch(arg(args, 0), "mac dock magnification <on|off>")
    defaults.write(DOMAIN, "magnification", enabled)
    if enabled:
        defaults.write(DOMAIN, "largesize", MAGNIFIED_SIZE)
    restart_dock()
    success(f"Dock magnification {'enabled' if enabled else 'disabled'}")


def reset(args: Sequence[str]) -> None:
    warning("This resets all Dock settings and removes custom apps from the Dock")
    if not confirm("Reset the Dock?", default=False):
        info("Dock reset cancelled")
        return
    defaults.delete(DOMAIN)
    defaults.write(DOMAIN, "orientation", "bottom")
    defaults.write(DOMAIN, "autohide", False)
    defaults.write(DOMAIN, "tilesize", SIZE_PIXELS["medium"])
    defaults.write(DOMAIN, "magnification", False)
    defaults.write(DOMAIN, "show-recents", True)
    restart_dock()
    success("Dock reset to defaults")


def add(args: Sequence[str]) -> None:
    name = require(args, 0, "App name", "mac dock add <app>")
    app = find_app(name)
    if app is None:
        raise UsageError(f"Application not found: {name}", ["Check the name in /Applications"])
    if not shell.command_exists("dockutil"):
        warning(f"dockutil is not installed; drag {app} to the Dock manually")
        info(DOCKUTIL_HINT)
        return
    if not shell.run(["dockutil", "--add", str(app)]).ok:
        raise CommandFailedError(f"Failed to add {app.stem} to the Dock")
    success(f"Added {app.stem} to the Dock")


def remove(args: Sequence[str]) -> None:
    name = require(args, 0, "App name", "mac dock remove <app>")
    if not shell.command_exists("dockutil"):
        warning(f"dockutil is not installed; drag {name} out of the Dock manually")
        info(DOCKUTIL_HINT)
        return
    if not shell.run(["dockutil", "--remove", name]).ok:
        raise CommandFailedError(f"Failed to remove {name} from the Dock")
    success(f"Removed {name} from the Dock")


def status(args: Sequence[str]) -> None:
    header("🚢 Dock Status")
    field("Position", defaults.read(DOMAIN, "orientation") or "bottom")
    field("Autohide", "on" if defaults.read_bool(DOMAIN, "autohide") else "off")
    tile_size = defaults.read_int(DOMAIN, "tilesize", SIZE_PIXELS["medium"])
    field("Size", f"{size_name(tile_size)} ({tile_size}px)")
    field("Magnification", "on" if defaults.read_bool(DOMAIN, "magnification") else "off")
    field("Recent apps", "shown" if defaults.read_bool(DOMAIN, "show-recents", True) else "hidden")
    field("Minimize effect", defaults.read(DOMAIN, "mineffect") or "genie")


TABLE = CommandTable(
    "dock",
    [
        Command("position", position, "Move the Dock", "<left|bottom|right>", keywords=("move",)),
        Command("autohide", autohide, "Auto-hide the Dock", "<on|off>", keywords=("hide", "auto")),
        Command("size", size, "Set the Dock size", "<small|medium|large>", keywords=("small", "large")),
        Command("magnification", magnification, "Magnify icons on hover", "<on|off>", keywords=("magnif", "zoom")),
        Command("reset", reset, "Reset the Dock to defaults", keywords=("default",)),
        Command("add", add, "Add an app to the Dock", "<app>", keywords=("app",)),
        Command("remove", remove, "Remove an app from the Dock", "<app>", keywords=("app",)),
        Command("status", status, "Show Dock settings", keywords=("info",)),
    ],
    examples=[
        "mac dock position left",
        "mac dock autohide on",
        "mac dock add Safari",
    ],
    tips=[
        "Adding and removing apps needs dockutil (brew install dockutil)",
        "A hidden Dock gives more screen space on small displays",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
