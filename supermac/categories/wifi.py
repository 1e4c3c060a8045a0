"""WiFi: power, status, scanning and saved networks."""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional, Sequence

from rich import box
from rich.table import Table
from rich.text import Text

from .. import parsers, shell
from ..commands import Command, CommandTable
from ..errors import CommandFailedError, UsageError
from ..formatting import console, field, header, info, line, success, warning
from ..polling import wait_for
from ..validation import arg, require
from .network import default_route, dns_servers

logger = logging.getLogger(__name__)

AIRPORT = "/System/Library/PrivateFrameworks/Apple80211.framework/Versions/Current/Resources/airport"
ON_ATTEMPTS = 10
OFF_ATTEMPTS = 5


def wifi_interface() -> str:
    device = parsers.wifi_device(shell.output(["networksetup", "-listallhardwareports"]))
    if device is None:
        raise CommandFailedError("WiFi interface not found", ["This Mac may not have a WiFi adapter"])
    return device


def power_state(interface: str) -> Optional[str]:
    return parsers.parse_airport_power(shell.output(["networksetup", "-getairportpower", interface]))


def set_power(interface: str, on: bool) -> None:
    result = shell.run(["networksetup", "-setairportpower", interface, "on" if on else "off"])
    if not result.ok:
        raise CommandFailedError(f"Failed to turn WiFi {'on' if on else 'off'}")


def current_network(interface: str) -> Optional[str]:
    return parsers.parse_current_network(shell.output(["networksetup", "-getairportnetwork", interface]))


def airport_path() -> Optional[str]:
    if os.path.exists(AIRPORT):
        return AIRPORT
    return "airport" if shell.command_exists("airport") else None


def airport_info() -> Dict[str, str]:
    airport = airport_path()
    if airport is None:
        return {}
    return parsers.parse_key_values(shell.output([airport, "-I"]))


def signal_quality(rssi: int) -> str:
    if rssi >= -50:
        return "Excellent"
    if rssi >= -60:
        return "Good"
    if rssi >= -70:
        return "Fair"
    return "Weak"


def turn_on(interface: str) -> None:
    if power_state(interface) == "On":
        info("WiFi is already on")
        return
    info("Turning WiFi on...")
    set_power(interface, True)
    result = wait_for(lambda: power_state(interface) == "On", attempts=ON_ATTEMPTS)
    if result.timed_out:
        raise CommandFailedError(f"WiFi did not turn on within {ON_ATTEMPTS} seconds")
    success("WiFi is on")
    network = current_network(interface)
    field("Network", network or "Not connected")


def turn_off(interface: str) -> None:
    if power_state(interface) == "Off":
        info("WiFi is already off")
        return
    info("Turning WiFi off...")
    set_power(interface, False)
    result = wait_for(lambda: power_state(interface) == "Off", attempts=OFF_ATTEMPTS)
    if result.timed_out:
        raise CommandFailedError("WiFi did not turn off")
    success("WiFi is off")


def _require_power(interface: str) -> None:
    if power_state(interface) != "On":
        raise UsageError("WiFi is off", ["Turn it on with 'mac wifi on'"])


def on(args: Sequence[str]) -> None:
    turn_on(wifi_interface())


def off(args: Sequence[str]) -> None:
    turn_off(wifi_interface())


def toggle(args: Sequence[str]) -> None:
    interface = wifi_interface()
    state = power_state(interface)
    if state == "On":
        turn_off(interface)
    elif state == "Off":
        turn_on(interface)
    else:
        raise CommandFailedError("Unable to determine WiFi state")


def _print_status(interface: str) -> Optional[str]:
    state = power_state(interface) or "Unknown"
    field("Interface", interface)
    field("Power", state)
    if state != "On":
        return state
    field("Network", current_network(interface) or "Not connected")
    rssi = airport_info().get("agrCtlRSSI")
    if rssi and rssi.lstrip("-").isdigit():
        field("Signal", f"{rssi} dBm ({signal_quality(int(rssi))})")
    field("IP address", shell.output(["ipconfig", "getifaddr", interface]) or "none")
    return state


def status(args: Sequence[str]) -> None:
    header("🌐 WiFi Status")
    _print_status(wifi_interface())


def show_info(args: Sequence[str]) -> None:
    header("🌐 WiFi Information")
    interface = wifi_interface()
    if _print_status(interface) != "On":
        return
    details = airport_info()
    for key, label in (("BSSID", "BSSID"), ("channel", "Channel"), ("link auth", "Security"), ("lastTxRate", "Tx rate (Mbps)")):
        if key in details:
            field(label, details[key])
    gateway, _ = default_route()
    field("Gateway", gateway or "unknown")
    servers = dns_servers()
    field("DNS servers", ", ".join(servers) if servers else "none")


def scan(args: Sequence[str]) -> None:
    interface = wifi_interface()
    _require_power(interface)
    airport = airport_path()
    if airport is None:
        warning("The airport utility is unavailable; showing saved networks instead")
        list_saved(args)
        return

    info("Scanning for networks...")
    results = sorted(parsers.parse_airport_scan(shell.output([airport, "-s"])), key=lambda r: r.rssi, reverse=True)
    if not results:
        warning("No networks found")
        return
    table = Table(title="Available Networks", box=box.SIMPLE_HEAD)
    table.add_column("Network")
    table.add_column("Signal", justify="right")
    table.add_column("Quality")
    table.add_column("Channel", justify="right")
    for result in results:
        table.add_row(Text(result.ssid), f"{result.rssi} dBm", signal_quality(result.rssi), result.channel)
    console().print(table)


def connect(args: Sequence[str]) -> None:
    name = require(args, 0, "Network name", "mac wifi connect <name> [password]")
    password = arg(args, 1)
    interface = wifi_interface()
    _require_power(interface)
    info(f"Connecting to {name}...")
    argv = ["networksetup", "-setairportnetwork", interface, name]
    if password:
        argv.append(password)
    result = shell.run(argv)
    # networksetup prints join failures on stdout with a zero exit status
    if not result.ok or "Could not" in result.stdout or "Error" in result.stdout:
        raise CommandFailedError(f"Failed to connect to {name}", [result.stdout.strip()] if result.stdout.strip() else [])
    success(f"Connected to {name}")


def forget(args: Sequence[str]) -> None:
    name = require(args, 0, "Network name", "mac wifi forget <name>")
    interface = wifi_interface()
    result = shell.run(["networksetup", "-removepreferredwirelessnetwork", interface, name])
    if not result.ok:
        raise CommandFailedError(f"Failed to forget {name}", ["Removing saved networks may require an administrator"])
    success(f"Forgot network: {name}")


def list_saved(args: Sequence[str]) -> None:
    interface = wifi_interface()
    networks = parsers.parse_preferred_networks(
        shell.output(["networksetup", "-listpreferredwirelessnetworks", interface])
    )
    if not networks:
        info("No saved networks")
        return
    header("💾 Saved Networks")
    for name in networks:
        line(f"  {name}")


TABLE = CommandTable(
    "wifi",
    [
        Command("on", on, "Turn WiFi on", aliases=("enable",), keywords=("wireless",)),
        Command("off", off, "Turn WiFi off", aliases=("disable",), keywords=("wireless",)),
        Command("toggle", toggle, "Toggle WiFi on or off", keywords=("wireless",)),
        Command("status", status, "Show WiFi status", keywords=("info", "network")),
        Command("info", show_info, "Show detailed connection info", keywords=("status", "network")),
        Command("scan", scan, "Scan for nearby networks", keywords=("network", "wireless")),
        Command("connect", connect, "Join a network", "<name> [password]", keywords=("network",)),
        Command("forget", forget, "Forget a saved network", "<name>", keywords=("remove",)),
        Command("list-saved", list_saved, "List saved networks", aliases=("saved",), keywords=("network",)),
    ],
    examples=[
        "mac wifi toggle",
        "mac wifi connect \"Coffee Shop\"",
        "mac wifi scan",
    ],
    tips=[
        "Toggle WiFi off and on to fix most connection problems",
        "Use 'mac network info' for routing and DNS details",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
