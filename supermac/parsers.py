"""Parsers for the text output of macOS command line tools."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Dict, List, Optional, Tuple

TRUE_WORDS = {"1", "true", "yes"}
FALSE_WORDS = {"0", "false", "no"}

_BSSID = r"(?:[0-9a-fA-F]{1,2}:){5}[0-9a-fA-F]{1,2}"
_SCAN_LINE = re.compile(
    rf"^\s*(?P<ssid>.*?)\s+(?:(?P<bssid>{_BSSID})\s+)?(?P<rssi>-\d+)\s+(?P<channel>\S+)"
)
_BATTERY_LINE = re.compile(r"InternalBattery\S*\s+(?:\(id=\d+\))?\s*(?P<percent>\d+)%;\s*(?P<state>[^;]+);\s*(?P<rest>.*)")
_POWER_SOURCE = re.compile(r"Now drawing from '(?P<source>[^']+)'")
_REMAINING = re.compile(r"(\d+:\d+) remaining")
_VM_PAGE_SIZE = re.compile(r"page size of (\d+) bytes")
_NAMESERVER = re.compile(r"nameserver\[\d+\]\s*:\s*(\S+)")
_PERCENT = re.compile(r"(\d+(?:\.\d+)?)\s*%")


def parse_bool(raw: Optional[str], default: bool = False) -> bool:
    """Interpret a ``defaults read`` value as a boolean."""
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_WORDS:
        return True
    if value in FALSE_WORDS:
        return False
    return default


def parse_key_values(text: str) -> Dict[str, str]:
    """First value of every ``Key: value`` line; later duplicates are ignored."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().strip('"')
        value = value.strip()
        if key and value and key not in values:
            values[key] = value
    return values


def parse_percent(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = _PERCENT.search(text)
    return int(float(match.group(1))) if match else None


# networksetup


def parse_hardware_ports(text: str) -> Dict[str, str]:
    """Map hardware port names to devices from ``networksetup -listallhardwareports``."""
    ports: Dict[str, str] = {}
    port: Optional[str] = None
    for line in text.splitlines():
        if line.startswith("Hardware Port:"):
            port = line.split(":", 1)[1].strip()
        elif line.startswith("Device:") and port:
            ports[port] = line.split(":", 1)[1].strip()
            port = None
    return ports


def wifi_device(text: str) -> Optional[str]:
    ports = parse_hardware_ports(text)
    return ports.get("Wi-Fi") or ports.get("AirPort")


def parse_airport_power(text: str) -> Optional[str]:
    """``On`` or ``Off`` from ``networksetup -getairportpower``."""
    words = text.strip().split()
    if words and words[-1] in ("On", "Off"):
        return words[-1]
    return None


def parse_current_network(text: str) -> Optional[str]:
    for prefix in ("Current Wi-Fi Network:", "Current AirPort Network:"):
        if text.strip().startswith(prefix):
            name = text.strip()[len(prefix):].strip()
            return name or None
    return None


def parse_preferred_networks(text: str) -> List[str]:
    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.startswith("Preferred networks on")
    ]


def parse_locations(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


# airport


@dataclass
class ScanResult:
    ssid: str
    rssi: int
    channel: str
    bssid: Optional[str] = None


def parse_airport_scan(text: str) -> List[ScanResult]:
    """Networks from ``airport -s``; SSIDs may contain spaces and BSSIDs may be redacted."""
    results: List[ScanResult] = []
    for line in text.splitlines():
        match = _SCAN_LINE.match(line)
        if not match:
            continue
        ssid = match.group("ssid").strip()
        if not ssid:
            continue
        results.append(
            ScanResult(
                ssid=ssid,
                rssi=int(match.group("rssi")),
                channel=match.group("channel"),
                bssid=match.group("bssid"),
            )
        )
    return results


# pmset


@dataclass
class BatteryStatus:
    percent: int
    state: str
    remaining: Optional[str]
    source: Optional[str]

    @property
    def on_ac_power(self) -> bool:
        return self.source == "AC Power"


def parse_pmset_battery(text: str) -> Optional[BatteryStatus]:
    """Battery line of ``pmset -g batt``; None on machines without a battery."""
    source_match = _POWER_SOURCE.search(text)
    source = source_match.group("source") if source_match else None
    for line in text.splitlines():
        match = _BATTERY_LINE.search(line)
        if not match:
            continue
        remaining = _REMAINING.search(match.group("rest"))
        return BatteryStatus(
            percent=int(match.group("percent")),
            state=match.group("state").strip(),
            remaining=remaining.group(1) if remaining else None,
            source=source,
        )
    return None


# vm_stat / memory_pressure


@dataclass
class VmStat:
    page_size: int
    pages: Dict[str, int] = field(default_factory=dict)

    def bytes_for(self, label: str) -> int:
        return self.pages.get(label, 0) * self.page_size


def parse_vm_stat(text: str, default_page_size: int = 4096) -> VmStat:
    """Page counts keyed by lower-case label without the ``Pages`` prefix."""
    page_size_match = _VM_PAGE_SIZE.search(text)
    stat = VmStat(page_size=int(page_size_match.group(1)) if page_size_match else default_page_size)
    for line in text.splitlines():
        if ":" not in line:
            continue
        label, value = line.rsplit(":", 1)
        value = value.strip().rstrip(".")
        if not value.isdigit():
            continue
        label = label.strip().strip('"').lower()
        if label.startswith("pages "):
            label = label[len("pages "):]
        stat.pages[label] = int(value)
    return stat


def parse_memory_pressure(text: str) -> Optional[int]:
    """Free percentage from ``memory_pressure``."""
    for line in text.splitlines():
        if "free percentage" in line:
            return parse_percent(line)
    return None


# scutil / route


def parse_scutil_dns(text: str, limit: int = 3) -> List[str]:
    servers: List[str] = []
    for match in _NAMESERVER.finditer(text):
        server = match.group(1)
        if server not in servers:
            servers.append(server)
    return servers[:limit]


def parse_default_route(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Gateway and interface from ``route -n get default``."""
    values = parse_key_values(text)
    return values.get("gateway"), values.get("interface")


# lsof


@dataclass
class Listener:
    command: str
    pid: int
    user: str
    address: str
    port: int


def parse_lsof_listeners(text: str) -> List[Listener]:
    """Listening sockets from ``lsof -i -P -n``."""
    listeners: List[Listener] = []
    for line in text.splitlines():
        if "(LISTEN)" not in line:
            continue
        tokens = line.split()
        if len(tokens) < 10 or not tokens[1].isdigit():
            continue
        address = tokens[-2]
        host, _, port = address.rpartition(":")
        if not port.isdigit():
            continue
        listeners.append(
            Listener(command=tokens[0], pid=int(tokens[1]), user=tokens[2], address=host, port=int(port))
        )
    return listeners


def parse_pids(text: str) -> List[int]:
    pids: List[int] = []
    for token in text.split():
        if token.isdigit() and int(token) not in pids:
            pids.append(int(token))
    return pids


# du


def parse_du(text: str) -> List[Tuple[int, str]]:
    """``(bytes, path)`` pairs from ``du -sk`` sorted largest first."""
    entries: List[Tuple[int, str]] = []
    for line in text.splitlines():
        size, _, path = line.partition("\t")
        if size.strip().isdigit() and path:
            entries.append((int(size) * 1024, path.strip()))
    return sorted(entries, key=lambda entry: entry[0], reverse=True)


# system_profiler


def parse_profiler_sections(text: str, section: str) -> List[Tuple[str, Dict[str, str]]]:
    """Named blocks nested under ``section`` in ``system_profiler`` output.

    Block headers are the lines ending in a colon at the first indentation
    level below the section line; ``Key: value`` lines belong to the block
    above them.
    """
    blocks: List[Tuple[str, Dict[str, str]]] = []
    section_indent: Optional[int] = None
    header_indent: Optional[int] = None
    current: Optional[Dict[str, str]] = None
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        indent = len(line) - len(line.lstrip())
        if stripped == section:
            section_indent = indent
            header_indent = None
            current = None
            continue
        if section_indent is None:
            continue
        if indent <= section_indent:
            section_indent = None
            current = None
            continue
        if stripped.endswith(":") and (header_indent is None or indent == header_indent):
            header_indent = indent
            current = {}
            blocks.append((stripped[:-1], current))
            continue
        if current is not None and ":" in stripped:
            key, value = stripped.split(":", 1)
            current.setdefault(key.strip(), value.strip())
    return blocks


@dataclass
class AudioDevice:
    name: str
    input_channels: int = 0
    output_channels: int = 0
    default_input: bool = False
    default_output: bool = False

    @property
    def is_input(self) -> bool:
        return self.input_channels > 0

    @property
    def is_output(self) -> bool:
        return self.output_channels > 0


def parse_audio_devices(text: str) -> List[AudioDevice]:
    """Devices from ``system_profiler SPAudioDataType``."""
    devices: List[AudioDevice] = []
    for name, values in parse_profiler_sections(text, "Devices:"):
        devices.append(
            AudioDevice(
                name=name,
                input_channels=_to_int(values.get("Input Channels")),
                output_channels=_to_int(values.get("Output Channels")),
                default_input=values.get("Default Input Device") == "Yes",
                default_output=values.get("Default Output Device") == "Yes",
            )
        )
    return devices


@dataclass
class Display:
    name: str
    resolution: Optional[str]
    main: bool


def parse_displays(text: str) -> List[Display]:
    """Connected displays from ``system_profiler SPDisplaysDataType``."""
    return [
        Display(name=name, resolution=values.get("Resolution"), main=values.get("Main Display") == "Yes")
        for name, values in parse_profiler_sections(text, "Displays:")
    ]


def parse_night_shift(text: str) -> bool:
    """Whether the CoreBrightness user record reports blue light reduction enabled."""
    return re.search(r"BlueLightReductionEnabled.*=\s*1", text) is not None


def _to_int(value: Optional[str]) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0
