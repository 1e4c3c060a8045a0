"""Audio: volume, mute, devices and balance."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .. import defaults, parsers, shell
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, MissingToolError
from ..formatting import field, header, info, line, subheader, success, warning
from ..validation import arg, choice, int_in_range, percentage, require

logger = logging.getLogger(__name__)

SWITCH_AUDIO = "SwitchAudioSource"
SWITCH_AUDIO_HINT = "Install it with: brew install switchaudio-osx"
DEFAULT_STEP = 10
BALANCE = {"left": "-1", "right": "1", "center": "0", "centre": "0"}
DEVICE_KINDS = {"all": "all", "output": "output", "input": "input"}


def volume_level() -> Optional[int]:
    result = shell.osascript("output volume of (get volume settings)")
    try:
        return int(result.stdout.strip()) if result.ok else None
    except ValueError:
        return None


def set_volume_level(level: int) -> None:
    if not shell.osascript(f"set volume output volume {level}").ok:
        raise CommandFailedError("Failed to set volume")


def is_muted() -> bool:
    return shell.osascript("output muted of (get volume settings)").stdout.strip() == "true"


def set_muted(muted: bool) -> None:
    if not shell.osascript(f"set volume {'with' if muted else 'without'} output muted").ok:
        raise CommandFailedError(f"Failed to {'mute' if muted else 'unmute'} audio")


def volume_tier(level: int) -> str:
    if level == 0:
        return "silent"
    if level <= 25:
        return "low"
    if level <= 75:
        return "medium"
    return "high"


def clamp(level: int) -> int:
    return max(0, min(100, level))


def _switch_audio_devices(kind: str) -> List[str]:
    result = shell.run([SWITCH_AUDIO, "-a", "-t", kind])
    return [name.strip() for name in result.stdout.splitlines() if name.strip()]


def _current_device(kind: str) -> Optional[str]:
    if shell.command_exists(SWITCH_AUDIO):
        return shell.output([SWITCH_AUDIO, "-c", "-t", kind]) or None
    for device in parsers.parse_audio_devices(shell.output(["system_profiler", "SPAudioDataType"])):
        if (kind == "output" and device.default_output) or (kind == "input" and device.default_input):
            return device.name
    return None


def volume(args: Sequence[str]) -> None:
    level = percentage(require(args, 0, "Volume level", "mac audio volume <0-100>"), "Volume")
    set_volume_level(level)
    success(f"Volume set to {level}% ({volume_tier(level)})")


def mute(args: Sequence[str]) -> None:
    if is_muted():
        info("Audio is already muted")
        return
    set_muted(True)
    success("Audio muted")


def unmute(args: Sequence[str]) -> None:
    if not is_muted():
        info("Audio is not muted")
        return
    set_muted(False)
    success("Audio unmuted")


def toggle_mute(args: Sequence[str]) -> None:
    muted = not is_muted()
    set_muted(muted)
    success("Audio muted" if muted else "Audio unmuted")


def devices(args: Sequence[str]) -> None:
    kind = choice(arg(args, 0, "all"), DEVICE_KINDS, "device type", "mac audio devices [all|output|input]")
    kinds = ["output", "input"] if kind == "all" else [kind]
    header("🎧 Audio Devices")
    if shell.command_exists(SWITCH_AUDIO):
        for current_kind in kinds:
            current = _current_device(current_kind)
            subheader(f"{current_kind.title()} devices")
            for name in _switch_audio_devices(current_kind):
                line(f"  {'* ' if name == current else '  '}{name}")
        return

    found = parsers.parse_audio_devices(shell.output(["system_profiler", "SPAudioDataType"]))
    for current_kind in kinds:
        subheader(f"{current_kind.title()} devices")
        for device in found:
            if current_kind == "output" and device.is_output:
                line(f"  {'* ' if device.default_output else '  '}{device.name}")
            elif current_kind == "input" and device.is_input:
                line(f"  {'* ' if device.default_input else '  '}{device.name}")
    line()
    info(f"{SWITCH_AUDIO} enables switching devices; {SWITCH_AUDIO_HINT}")


def _switch_device(args: Sequence[str], kind: str) -> None:
    name = require(args, 0, "Device name", f"mac audio {kind} <device>")
    if not shell.command_exists(SWITCH_AUDIO):
        raise MissingToolError(SWITCH_AUDIO, SWITCH_AUDIO_HINT)
    if not shell.run([SWITCH_AUDIO, "-s", name, "-t", kind]).ok:
        raise CommandFailedError(f"Failed to switch {kind} to {name}", [f"List devices with 'mac audio devices {kind}'"])
    success(f"{kind.title()} switched to {name}")


def output(args: Sequence[str]) -> None:
    _switch_device(args, "output")


def input_device(args: Sequence[str]) -> None:
    _switch_device(args, "input")


def balance(args: Sequence[str]) -> None:
    side = choice(arg(args, 0), {key: key for key in BALANCE}, "balance", "mac audio balance <left|right|center>")
    script = (
        "set volume output volume (output volume of (get volume settings)) "
        f"with output balance {BALANCE[side]}"
    )
    if not shell.osascript(script).ok:
        raise CommandFailedError("Failed to set balance", ["Adjust balance in System Settings > Sound"])
    success(f"Balance set to {'center' if side == 'centre' else side}")


def _step(args: Sequence[str], direction: int) -> None:
    step = int_in_range(arg(args, 0, str(DEFAULT_STEP)), "Step", 1, 100)
    current = volume_level()
    if current is None:
        raise CommandFailedError("Could not read the current volume")
    level = clamp(current + direction * step)
    set_volume_level(level)
    success(f"Volume {current}% -> {level}%")


def up(args: Sequence[str]) -> None:
    _step(args, 1)


def down(args: Sequence[str]) -> None:
    _step(args, -1)


def status(args: Sequence[str]) -> None:
    header("🔊 Audio Status")
    level = volume_level()
    field("Volume", f"{level}% ({volume_tier(level)})" if level is not None else "unknown")
    field("Muted", "yes" if is_muted() else "no")
    field("Output", _current_device("output") or "unknown")
    field("Input", _current_device("input") or "unknown")
    effects = defaults.read_bool(defaults.GLOBAL_DOMAIN, "com.apple.sound.uiaudio.enabled", True)
    field("Sound effects", "on" if effects else "off")
    alert = shell.osascript("alert volume of (get volume settings)")
    if alert.ok and alert.stdout.strip():
        field("Alert volume", f"{alert.stdout.strip()}%")
    if not shell.command_exists(SWITCH_AUDIO):
        warning(f"{SWITCH_AUDIO} not found; device switching is unavailable")


TABLE = CommandTable(
    "audio",
    [
        Command("volume", volume, "Set the output volume", "<0-100>", keywords=("sound",)),
        Command("mute", mute, "Mute audio", keywords=("silent",)),
        Command("unmute", unmute, "Unmute audio", keywords=("sound",)),
        Command("toggle-mute", toggle_mute, "Toggle mute", keywords=("mute", "silent")),
        Command("devices", devices, "List audio devices", "[all|output|input]", keywords=("device", "speaker", "headphone")),
        Command("output", output, "Switch the output device", "<device>", keywords=("device", "speaker", "headphone")),
        Command("input", input_device, "Switch the input device", "<device>", keywords=("device", "microphone")),
        Command("balance", balance, "Set left/right balance", "<left|right|center>", keywords=("left", "right")),
        Command("up", up, "Raise the volume", "[step]", keywords=("volume", "sound")),
        Command("down", down, "Lower the volume", "[step]", keywords=("volume", "sound")),
        Command("status", status, "Show audio settings", keywords=("info",)),
    ],
    examples=[
        "mac audio volume 50",
        "mac vol 30",
        "mac audio output \"AirPods Pro\"",
    ],
    tips=[
        "Device switching needs SwitchAudioSource (brew install switchaudio-osx)",
        "'mac audio up 5' raises the volume in small steps",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
