"""Display: brightness, appearance, Night Shift, True Tone and resolutions."""

from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

from .. import defaults, parsers, shell
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, UsageError
from ..formatting import field, header, info, line, success, warning
from ..validation import arg, choice, percentage, require

logger = logging.getLogger(__name__)

APPEARANCE_KEY = "AppleInterfaceStyle"
BRIGHTNESS_QUERY = (
    'tell application "System Events" to tell (first item of (displays whose built in is true)) to get brightness'
)
BRIGHTNESS_SET = (
    'tell application "System Events" to tell (first item of (displays whose built in is true)) '
    "to set brightness to {value}"
)
APPEARANCE_SET = 'tell application "System Events" to tell appearance preferences to set dark mode to {value}'
NIGHT_SHIFT_SET = 'tell application "System Events" to tell appearance preferences to set night shift enabled to {value}'
TRUE_TONE_SET = 'tell application "System Events" to tell appearance preferences to set true tone enabled to {value}'
STATE_WORDS = {"on": "on", "enable": "on", "off": "off", "disable": "off", "status": "status"}


def get_brightness() -> Optional[int]:
    result = shell.osascript(BRIGHTNESS_QUERY)
    try:
        return round(float(result.stdout.strip()) * 100) if result.ok else None
    except ValueError:
        return None


def set_brightness(level: int) -> None:
    result = shell.osascript(BRIGHTNESS_SET.format(value=f"{level / 100:.2f}"))
    if not result.ok:
        raise CommandFailedError(
            "Failed to set brightness",
            ["Grant Accessibility access to your terminal in System Settings > Privacy & Security"],
        )


def is_dark_mode() -> bool:
    return defaults.read(defaults.GLOBAL_DOMAIN, APPEARANCE_KEY) == "Dark"


def set_dark_mode(dark: bool) -> None:
    result = shell.osascript(APPEARANCE_SET.format(value="true" if dark else "false"))
    if result.ok:
        return
    logger.debug("System Events refused the appearance change, writing the preference directly")
    if dark:
        defaults.write(defaults.GLOBAL_DOMAIN, APPEARANCE_KEY, "Dark")
    else:
        defaults.delete(defaults.GLOBAL_DOMAIN, APPEARANCE_KEY)
    info("Log out and back in if the appearance does not change")


def night_shift_enabled() -> bool:
    record = shell.output(["defaults", "read", "com.apple.CoreBrightness", f"CBUser-{os.getuid()}"])
    return parsers.parse_night_shift(record)


def _set_osascript_flag(template: str, enabled: bool, feature: str) -> None:
    if not shell.osascript(template.format(value="true" if enabled else "false")).ok:
        raise CommandFailedError(
            f"Failed to {'enable' if enabled else 'disable'} {feature}",
            [f"You may need to change {feature} in System Settings > Displays"],
        )


def brightness(args: Sequence[str]) -> None:
    value = require(args, 0, "Brightness level", "mac display brightness <0-100>")
    level = percentage(value, "Brightness")
    set_brightness(level)
    success(f"Brightness set to {level}%")
    if level <= 20:
        info("Low brightness saves battery")
    elif level >= 80:
        info("High brightness drains the battery faster")


def dark_mode(args: Sequence[str]) -> None:
    if is_dark_mode():
        info("Dark mode is already on")
        return
    set_dark_mode(True)
    success("Dark mode enabled")


def light_mode(args: Sequence[str]) -> None:
    if not is_dark_mode():
        info("Light mode is already on")
        return
    set_dark_mode(False)
    success("Light mode enabled")


def toggle_mode(args: Sequence[str]) -> None:
    dark = not is_dark_mode()
    set_dark_mode(dark)
    success(f"{'Dark' if dark else 'Light'} mode enabled")


def night_shift(args: Sequence[str]) -> None:
    action = choice(arg(args, 0), STATE_WORDS, "Night Shift action", "mac display night-shift <on|off|status>")
    if action == "status":
        field("Night Shift", "enabled" if night_shift_enabled() else "disabled")
        return
    enabled = action == "on"
    _set_osascript_flag(NIGHT_SHIFT_SET, enabled, "Night Shift")
    success(f"Night Shift {'enabled' if enabled else 'disabled'}")
    if enabled:
        info("Night Shift reduces blue light in the evening")


def true_tone(args: Sequence[str]) -> int:
    words = {key: value for key, value in STATE_WORDS.items() if value != "status"}
    action = choice(arg(args, 0), words, "True Tone action", "mac display true-tone <on|off>")
    if "True Tone" not in shell.output(["system_profiler", "SPDisplaysDataType"]):
        warning("True Tone is not supported on this display")
        return 1
    enabled = action == "on"
    _set_osascript_flag(TRUE_TONE_SET, enabled, "True Tone")
    success(f"True Tone {'enabled' if enabled else 'disabled'}")
    return 0


def detect(args: Sequence[str]) -> None:
    info("Detecting displays...")
    displays = parsers.parse_displays(shell.output(["system_profiler", "SPDisplaysDataType"]))
    if not displays:
        warning("No displays reported by the system")
        info("Try System Settings > Displays and hold Option to show Detect Displays")
        return
    success(f"{len(displays)} display(s) detected")
    for display in displays:
        line(f"  {display.name}{' (main)' if display.main else ''}")


def resolution(args: Sequence[str]) -> None:
    action = arg(args, 0, "list")
    if action != "list":
        raise UsageError(f"Invalid resolution action: {action}", ["Usage: mac display resolution list"])
    header("🖥️ Display Resolutions")
    displays = parsers.parse_displays(shell.output(["system_profiler", "SPDisplaysDataType"]))
    if not displays:
        info("No display information available")
        return
    for display in displays:
        field(display.name, display.resolution or "unknown")


def status(args: Sequence[str]) -> None:
    header("🖥️ Display Status")
    level = get_brightness()
    field("Brightness", f"{level}%" if level is not None else "unavailable")
    field("Appearance", "Dark" if is_dark_mode() else "Light")
    field("Night Shift", "enabled" if night_shift_enabled() else "disabled")
    displays = parsers.parse_displays(shell.output(["system_profiler", "SPDisplaysDataType"]))
    field("Displays", len(displays))
    main = next((display for display in displays if display.main), displays[0] if displays else None)
    if main is not None:
        field("Resolution", main.resolution or "unknown")


TABLE = CommandTable(
    "display",
    [
        Command("brightness", brightness, "Set screen brightness", "<0-100>", keywords=("bright",)),
        Command("dark-mode", dark_mode, "Switch to dark mode", keywords=("dark", "mode", "theme")),
        Command("light-mode", light_mode, "Switch to light mode", keywords=("light", "mode", "theme")),
        Command("toggle-mode", toggle_mode, "Toggle dark and light mode", keywords=("dark", "light", "mode", "theme")),
        Command("night-shift", night_shift, "Control Night Shift", "<on|off|status>", keywords=("night", "shift", "blue")),
        Command("true-tone", true_tone, "Control True Tone", "<on|off>", keywords=("true", "tone")),
        Command("detect", detect, "Detect connected displays", keywords=("resolution",)),
        Command("resolution", resolution, "List display resolutions", "list", keywords=("detect",)),
        Command("status", status, "Show display settings", keywords=("info",)),
    ],
    examples=[
        "mac display brightness 50",
        "mac dark",
        "mac display night-shift on",
    ],
    tips=[
        "Lower brightness extends battery life",
        "Brightness control needs Accessibility access for your terminal",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
