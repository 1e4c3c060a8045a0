"""Screenshot: save location, file format, capture options and taking screenshots."""

from __future__ import annotations

from datetime import datetime
import logging
import os
from pathlib import Path
import time
from typing import Optional, Sequence

from .. import defaults, shell
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, UsageError
from ..formatting import confirm, field, header, info, success, warning
from ..validation import arg, choice, require, switch

logger = logging.getLogger(__name__)

DOMAIN = "com.apple.screencapture"
DEFAULT_NAME_FORMAT = "Screenshot %Y-%m-%d at %H.%M.%S"
NAME_FORMAT_KEY = "name"
FOLDERS = {"desktop": "Desktop", "downloads": "Downloads", "documents": "Documents", "pictures": "Pictures"}
FORMATS = {"png": "png", "jpg": "jpg", "jpeg": "jpg", "pdf": "pdf", "tiff": "tiff", "tif": "tiff"}
CAPTURE_MODES = {"area": ["-i"], "window": ["-i", "-w"], "screen": ["-x"]}


def apply_changes() -> None:
    if not shell.killall("SystemUIServer"):
        logger.debug("SystemUIServer was not restarted")
    time.sleep(1)


def save_location() -> str:
    """``clipboard`` or the folder screenshots are written to."""
    if defaults.read(DOMAIN, "target") == "clipboard":
        return "clipboard"
    return defaults.read(DOMAIN, "location") or str(Path.home() / "Desktop")


def file_format() -> str:
    return defaults.read(DOMAIN, "type") or "png"


def name_format() -> str:
    return defaults.read(DOMAIN, NAME_FORMAT_KEY) or DEFAULT_NAME_FORMAT


def screenshot_path(folder: Path, fmt: str, pattern: str, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime(pattern)
    return folder / f"{stamp}.{fmt}"


def location(args: Sequence[str]) -> None:
    target = require(
        args, 0, "Location", "mac screenshot location <desktop|downloads|documents|pictures|clipboard|path>"
    )
    key = target.lower()
    if key == "clipboard":
        defaults.write(DOMAIN, "target", "clipboard")
        apply_changes()
        success("Screenshots will be copied to the clipboard")
        return
    folder = Path.home() / FOLDERS[key] if key in FOLDERS else Path(os.path.expanduser(target))
    if not folder.is_dir():
        raise UsageError(f"Directory does not exist: {folder}", ["Create it first or pick another location"])
    defaults.write(DOMAIN, "location", str(folder.resolve()))
    defaults.write(DOMAIN, "target", "file")
    apply_changes()
    success(f"Screenshots will be saved to {folder}")


def set_format(args: Sequence[str]) -> None:
    fmt = choice(arg(args, 0), FORMATS, "format", "mac screenshot format <png|jpg|pdf|tiff>")
    defaults.write(DOMAIN, "type", fmt)
    apply_changes()
    success(f"Screenshot format set to {fmt.upper()}")


def _toggle_option(args: Sequence[str], key: str, label: str, usage: str, inverted: bool = False) -> None:
    enabled = switch(arg(args, 0), usage)
    defaults.write(DOMAIN, key, not enabled if inverted else enabled)
    apply_changes()
    success(f"{label} {'enabled' if enabled else 'disabled'}")


def shadows(args: Sequence[str]) -> None:
    _toggle_option(args, "disable-shadow", "Window shadows", "mac screenshot shadows <on|off>", inverted=True)


def show_cursor(args: Sequence[str]) -> None:
    _toggle_option(args, "showsCursor", "Cursor in screenshots", "mac screenshot show-cursor <on|off>")


def thumbnail(args: Sequence[str]) -> None:
    _toggle_option(args, "show-thumbnail", "Floating thumbnail", "mac screenshot thumbnail <on|off>")


def sound(args: Sequence[str]) -> None:
    _toggle_option(args, "disable-sound", "Shutter sound", "mac screenshot sound <on|off>", inverted=True)


def set_name_format(args: Sequence[str]) -> None:
    pattern = require(args, 0, "Name format", "mac screenshot name-format <format>")
    defaults.write(DOMAIN, NAME_FORMAT_KEY, pattern)
    apply_changes()
    success(f"Screenshot name format set to: {pattern}")
    info(f"Example: {screenshot_path(Path('.'), file_format(), pattern).name}")


def take(args: Sequence[str]) -> int:
    mode = choice(arg(args, 0, "area"), {key: key for key in CAPTURE_MODES}, "capture mode", "mac screenshot take [area|window|screen]")
    argv = ["screencapture", *CAPTURE_MODES[mode], "-t", file_format()]
    destination = save_location()
    if destination == "clipboard":
        result = shell.run([*argv, "-c"], timeout=None)
        if not result.ok:
            raise CommandFailedError("Screenshot failed")
        success("Screenshot copied to the clipboard")
        return 0

    path = screenshot_path(Path(destination), file_format(), name_format())
    if mode != "screen":
        info("Select the area or window to capture (Esc cancels)")
    result = shell.run([*argv, str(path)], timeout=None)
    if not result.ok:
        raise CommandFailedError("Screenshot failed", [result.stderr.strip()] if result.stderr.strip() else [])
    if not path.exists():
        warning("Screenshot cancelled")
        return 1
    success(f"Screenshot saved to {path}")
    return 0


def status(args: Sequence[str]) -> None:
    header("📸 Screenshot Settings")
    field("Location", save_location())
    field("Format", file_format().upper())
    field("Shadows", "off" if defaults.read_bool(DOMAIN, "disable-shadow") else "on")
    field("Cursor", "shown" if defaults.read_bool(DOMAIN, "showsCursor") else "hidden")
    field("Thumbnail", "on" if defaults.read_bool(DOMAIN, "show-thumbnail", True) else "off")
    field("Sound", "off" if defaults.read_bool(DOMAIN, "disable-sound") else "on")
    field("Name format", name_format())


def reset(args: Sequence[str]) -> None:
    warning("This resets all screenshot settings to their defaults")
    if not confirm("Reset screenshot settings?", default=False):
        info("Reset cancelled")
        return
    defaults.delete(DOMAIN)
    apply_changes()
    success("Screenshot settings reset")


TABLE = CommandTable(
    "screenshot",
    [
        Command("location", location, "Set where screenshots are saved", "<place|path>", keywords=("save", "folder", "clipboard", "copy")),
        Command("format", set_format, "Set the file format", "<png|jpg|pdf|tiff>", keywords=("png", "jpg")),
        Command("shadows", shadows, "Window shadows", "<on|off>", keywords=("shadow", "window")),
        Command("show-cursor", show_cursor, "Include the cursor", "<on|off>", keywords=("cursor", "mouse")),
        Command("thumbnail", thumbnail, "Floating thumbnail preview", "<on|off>", keywords=("preview",)),
        Command("sound", sound, "Shutter sound", "<on|off>", keywords=("camera", "audio")),
        Command("name-format", set_name_format, "Set the file name pattern", "<format>", keywords=("name",)),
        Command("take", take, "Take a screenshot", "[area|window|screen]", keywords=("capture",)),
        Command("status", status, "Show screenshot settings", keywords=("info",)),
        Command("reset", reset, "Reset screenshot settings", keywords=("default",)),
    ],
    examples=[
        "mac screenshot location downloads",
        "mac screenshot format jpg",
        "mac screenshot take window",
    ],
    tips=[
        "Cmd+Shift+4 captures an area, Cmd+Shift+5 opens the capture toolbar",
        "JPG files are smaller, PNG keeps full quality",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
