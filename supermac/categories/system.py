"""System: hardware info, maintenance, battery, memory, CPU, disk and processes."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import platform
from stat import S_ISREG
import time
from typing import Iterable, Optional, Sequence

from .. import parsers, shell, system_state
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, UsageError
from ..formatting import (
    confirm,
    console,
    field,
    format_bytes,
    format_duration,
    header,
    info,
    line,
    process_table,
    subheader,
    success,
    warning,
)
from ..validation import arg, choice

logger = logging.getLogger(__name__)

DAY = 24 * 60 * 60
CACHE_MAX_AGE_DAYS = 7
DOWNLOADS_MAX_AGE_DAYS = 30
TMP_MAX_AGE_DAYS = 3


@dataclass
class CleanupReport:
    removed: int = 0
    freed_bytes: int = 0

    def add(self, other: "CleanupReport") -> None:
        self.removed += other.removed
        self.freed_bytes += other.freed_bytes


def battery_health(max_capacity: int) -> str:
    if max_capacity > 80:
        return "Good"
    if max_capacity > 60:
        return "Fair"
    return "Poor"


def memory_pressure_level(free_percent: int) -> str:
    if free_percent > 20:
        return "Low"
    if free_percent > 10:
        return "Medium"
    return "High"


def remove_older_than(
    root: Path,
    days: int,
    owner: Optional[int] = None,
    now: Optional[float] = None,
    accessed: bool = False,
) -> CleanupReport:
    """Delete regular files under ``root`` not modified for ``days`` days.

    Folders are never removed as a whole, so a recent file inside an old
    folder survives. With ``accessed`` the access time is compared instead
    of the modification time; ``owner`` limits deletion to one uid.
    """
    report = CleanupReport()
    if not root.is_dir():
        return report
    cutoff = (now if now is not None else time.time()) - days * DAY
    for folder, _, names in os.walk(root):
        for name in names:
            path = Path(folder) / name
            try:
                stat = path.lstat()
            except OSError as exc:
                logger.debug("Could not stat %s: %s", path, exc)
                continue
            if not S_ISREG(stat.st_mode):
                continue
            if owner is not None and stat.st_uid != owner:
                continue
            if (stat.st_atime if accessed else stat.st_mtime) >= cutoff:
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.debug("Could not remove %s: %s", path, exc)
                continue
            report.removed += 1
            report.freed_bytes += stat.st_size
    return report


def info_screen(args: Sequence[str]) -> None:
    header("🖥️ System Information")
    _basic_info()


def _basic_info() -> None:
    versions = parsers.parse_key_values(shell.output(["sw_vers"]))
    hardware = parsers.parse_key_values(shell.output(["system_profiler", "SPHardwareDataType"]))
    field("macOS", f"{versions.get('ProductVersion', 'unknown')} ({versions.get('BuildVersion', '?')})")
    field("Model", hardware.get("Model Name", "unknown"))
    field("Chip", hardware.get("Chip") or hardware.get("Processor Name", "unknown"))
    field("Memory", hardware.get("Memory", "unknown"))
    field("Architecture", platform.machine())
    field("Uptime", format_duration(system_state.uptime_seconds()))
    field("Shell", os.environ.get("SHELL", "unknown"))
    disk = system_state.disk_usage("/")
    field("Disk", f"{format_bytes(disk.used)} used of {format_bytes(disk.total)} ({disk.percent:.0f}%)")


def detailed_info(args: Sequence[str]) -> None:
    header("🖥️ Detailed System Information")
    _basic_info()
    hardware = parsers.parse_key_values(shell.output(["system_profiler", "SPHardwareDataType"]))
    summary = system_state.cpu_summary()
    subheader("Hardware")
    field("Model identifier", hardware.get("Model Identifier", "unknown"))
    field("Cores", f"{summary.physical_cores} physical, {summary.logical_cores} logical")
    field("Total cores", hardware.get("Total Number of Cores", "unknown"))
    field("Serial number", hardware.get("Serial Number (system)", "unknown"))
    field("Firmware", hardware.get("System Firmware Version", "unknown"))


def cleanup(args: Sequence[str]) -> None:
    header("🧹 System Cleanup")
    info("This removes old caches, downloads older than 30 days and empties the Trash")
    if not confirm("Continue with cleanup?", default=True):
        info("Cleanup cancelled")
        return

    home = Path.home()
    total = CleanupReport()

    info("Clearing user caches...")
    total.add(remove_older_than(home / "Library" / "Caches", CACHE_MAX_AGE_DAYS, accessed=True))

    info("Removing old downloads...")
    total.add(remove_older_than(home / "Downloads", DOWNLOADS_MAX_AGE_DAYS))

    info("Emptying Trash...")
    if not shell.osascript('tell application "Finder" to empty trash').ok:
        warning("Could not empty the Trash")

    if shell.can_sudo_without_password():
        info("Clearing system logs...")
        shell.run(["sudo", "-n", "find", "/private/var/log/asl", "-name", "*.asl", "-mtime", "+7", "-delete"])
    else:
        logger.debug("Skipping system logs: sudo needs a password")

    info("Clearing Safari cache...")
    total.add(remove_older_than(home / "Library" / "Caches" / "com.apple.Safari", 0, accessed=True))

    info("Clearing temporary files...")
    total.add(remove_older_than(Path("/tmp"), TMP_MAX_AGE_DAYS, owner=os.getuid()))

    info("Clearing font caches...")
    if not shell.run(["atsutil", "databases", "-removeUser"]).ok:
        logger.debug("atsutil failed; font caches left in place")

    success(f"Cleanup complete: {total.removed} items removed, {format_bytes(total.freed_bytes)} freed")


def battery(args: Sequence[str]) -> None:
    status = parsers.parse_pmset_battery(shell.output(["pmset", "-g", "batt"]))
    if status is None:
        info("No battery information available (desktop Mac)")
        return
    header("🔋 Battery Status")
    field("Charge", f"{status.percent}%")
    field("State", status.state)
    if status.remaining:
        field("Time remaining", status.remaining)
    field("Power source", status.source or "unknown")

    power = parsers.parse_key_values(shell.output(["system_profiler", "SPPowerDataType"]))
    if "Cycle Count" in power:
        field("Cycle count", power["Cycle Count"])
    capacity = parsers.parse_percent(power.get("Maximum Capacity"))
    if capacity is not None:
        field("Maximum capacity", f"{capacity}%")
        field("Health", battery_health(capacity))
    if status.percent <= 20 and not status.on_ac_power:
        warning("Battery is low; connect a charger")


def memory(args: Sequence[str]) -> None:
    header("🧠 Memory Usage")
    stat = parsers.parse_vm_stat(shell.output(["vm_stat"]))
    breakdown = [
        ("Free", stat.bytes_for("free")),
        ("Active", stat.bytes_for("active")),
        ("Inactive", stat.bytes_for("inactive")),
        ("Wired", stat.bytes_for("wired down")),
        ("Compressed", stat.bytes_for("occupied by compressor")),
    ]
    used = stat.bytes_for("active") + stat.bytes_for("wired down") + stat.bytes_for("occupied by compressor")
    total = sum(size for _, size in breakdown)
    field("Used", f"{format_bytes(used)} of {format_bytes(total)}")
    for label, size in breakdown:
        field(label, format_bytes(size))
    free_percent = parsers.parse_memory_pressure(shell.output(["memory_pressure"]))
    if free_percent is not None:
        level = memory_pressure_level(free_percent)
        field("Memory pressure", f"{level} ({free_percent}% free)")
        if level == "High":
            warning("Memory pressure is high; close unused apps ('mac dev memory-hogs')")


def cpu(args: Sequence[str]) -> None:
    header("⚙️ CPU Information")
    field("Processor", shell.output(["sysctl", "-n", "machdep.cpu.brand_string"]) or platform.processor() or "unknown")
    summary = system_state.cpu_summary()
    field("Physical cores", summary.physical_cores)
    field("Logical cores", summary.logical_cores)
    field("Usage", f"{summary.user_percent:.1f}% user, {summary.system_percent:.1f}% system, {summary.idle_percent:.1f}% idle")
    field("Load average", _format_load(summary.load_avg))


def disk_usage(args: Sequence[str]) -> None:
    target = Path(os.path.expanduser(arg(args, 0, str(Path.home()))))
    if not target.is_dir():
        raise UsageError(f"Directory not found: {target}")
    header(f"💾 Disk Usage: {target}")
    disk = system_state.disk_usage(str(target))
    field("Volume", f"{format_bytes(disk.used)} used, {format_bytes(disk.free)} free of {format_bytes(disk.total)}")
    try:
        entries = [str(child) for child in target.iterdir()]
    except OSError as exc:
        raise CommandFailedError(f"Cannot read {target}", [exc.strerror or str(exc)]) from exc
    if not entries:
        return
    result = shell.run(["du", "-sk", *entries], timeout=300)
    subheader("Largest items")
    for size, path in parsers.parse_du(result.stdout)[:10]:
        line(f"  {format_bytes(size):>10}  {Path(path).name}")


def processes(args: Sequence[str]) -> None:
    sort_by = choice(arg(args, 0, "cpu"), {"cpu": "cpu", "memory": "memory", "mem": "memory"}, "sort order", "mac system processes [cpu|memory]")
    top = system_state.top_processes(system_state.list_processes(), sort_by, 10)
    console().print(process_table(f"Top processes by {sort_by}", top))


def uptime(args: Sequence[str]) -> None:
    field("Booted", f"{system_state.boot_time():%Y-%m-%d %H:%M}")
    field("Uptime", format_duration(system_state.uptime_seconds()))
    field("Load average", _format_load(system_state.load_average()))


def _format_load(load: Iterable[float]) -> str:
    return " / ".join(f"{value:.2f}" for value in load)


TABLE = CommandTable(
    "system",
    [
        Command("info", info_screen, "Show system overview", keywords=("status",)),
        Command("detailed-info", detailed_info, "Show detailed hardware info", keywords=("status",)),
        Command("cleanup", cleanup, "Remove caches and old files", keywords=("clean",)),
        Command("battery", battery, "Show battery status and health", keywords=("power",)),
        Command("memory", memory, "Show memory usage", aliases=("mem",), keywords=("ram",)),
        Command("cpu", cpu, "Show CPU information", keywords=("processor",)),
        Command("disk-usage", disk_usage, "Show disk usage of a folder", "[dir]", keywords=("disk", "storage")),
        Command("processes", processes, "Show top processes", "[cpu|memory]", keywords=("process", "top")),
        Command("uptime", uptime, "Show uptime and load"),
    ],
    examples=[
        "mac system info",
        "mac system battery",
        "mac system disk-usage ~/Library",
    ],
    tips=[
        "Run cleanup monthly to reclaim space",
        "High memory pressure means apps are being swapped",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
