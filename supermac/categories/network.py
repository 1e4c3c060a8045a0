"""Network: addresses, DNS, connectivity checks, DHCP and locations."""

from __future__ import annotations

import ipaddress
import json
import logging
import time
from typing import Dict, List, Optional, Sequence, Tuple
import urllib.error
import urllib.request

from .. import parsers, shell
from ..commands import Command, CommandTable
from ..config import get_settings
from ..errors import CommandFailedError, UsageError
from ..formatting import confirm, field, header, info, line, success, warning
from ..validation import arg, int_in_range, require

logger = logging.getLogger(__name__)

INTERFACES = ("en0", "en1", "en2", "en3")
PUBLIC_IP_SERVICES = (
    "https://ifconfig.me/ip",
    "https://ipinfo.io/ip",
    "https://api.ipify.org",
    "https://checkip.amazonaws.com",
)
LOCATION_URL = "https://ipinfo.io/{ip}/json"
SPEED_TEST_URL = "https://httpbin.org/bytes/1024"
REQUEST_TIMEOUT = 10
USER_AGENT = "supermac"
NETWORK_PLISTS = (
    "/Library/Preferences/SystemConfiguration/NetworkInterfaces.plist",
    "/Library/Preferences/SystemConfiguration/preferences.plist",
    "/Library/Preferences/SystemConfiguration/com.apple.airport.preferences.plist",
)


def fetch_text(url: str, timeout: float = REQUEST_TIMEOUT) -> str:
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return response.read().decode("utf-8", "replace")


def local_ip() -> Tuple[Optional[str], Optional[str]]:
    """First configured address among the built-in interfaces, with its interface."""
    for interface in INTERFACES:
        address = shell.output(["ipconfig", "getifaddr", interface])
        if address:
            return address, interface
    return None, None


def is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def public_ip() -> Optional[str]:
    for url in PUBLIC_IP_SERVICES:
        try:
            candidate = fetch_text(url).strip()
        except (urllib.error.URLError, OSError) as exc:
            logger.debug("Public IP lookup via %s failed: %s", url, exc)
            continue
        if is_ipv4(candidate):
            return candidate
        logger.debug("Ignoring non-IPv4 answer from %s: %r", url, candidate)
    return None


def ip_location(address: str) -> Dict[str, str]:
    try:
        payload = json.loads(fetch_text(LOCATION_URL.format(ip=address)))
    except (urllib.error.URLError, OSError, ValueError) as exc:
        logger.debug("Location lookup failed: %s", exc)
        return {}
    if not isinstance(payload, dict):
        return {}
    return {key: str(payload[key]) for key in ("city", "region", "country", "org") if payload.get(key)}


def default_route() -> Tuple[Optional[str], Optional[str]]:
    return parsers.parse_default_route(shell.output(["route", "-n", "get", "default"]))


def dns_servers(limit: int = 3) -> List[str]:
    return parsers.parse_scutil_dns(shell.output(["scutil", "--dns"]), limit=limit)


def show_ip(args: Sequence[str]) -> int:
    address, interface = local_ip()
    if address is None:
        warning("No local IP address found; are you connected to a network?")
        return 1
    field("Local IP", f"{address} ({interface})")
    return 0


def show_public_ip(args: Sequence[str]) -> None:
    info("Looking up public IP address...")
    address = public_ip()
    if address is None:
        raise CommandFailedError("Could not determine public IP address", ["Check your internet connection"])
    field("Public IP", address)
    location = ip_location(address)
    place = ", ".join(location[key] for key in ("city", "region", "country") if key in location)
    if place:
        field("Location", place)
    if "org" in location:
        field("Provider", location["org"])


def show_info(args: Sequence[str]) -> None:
    header("📡 Network Information")
    address, interface = local_ip()
    field("Local IP", address or "not connected")
    field("Interface", interface or "none")
    gateway, route_interface = default_route()
    field("Gateway", gateway or "unknown")
    if route_interface:
        field("Route interface", route_interface)
    servers = dns_servers()
    field("DNS servers", ", ".join(servers) if servers else "none")
    if interface in ("en0", "en1"):
        network = parsers.parse_current_network(shell.output(["networksetup", "-getairportnetwork", interface]))
        if network:
            field("WiFi network", network)


def flush_dns(args: Sequence[str]) -> None:
    info("Flushing DNS cache (administrator password may be required)...")
    if not shell.sudo(["dscacheutil", "-flushcache"]).ok:
        raise CommandFailedError("Failed to flush DNS cache")
    if not shell.sudo(["killall", "-HUP", "mDNSResponder"]).ok:
        raise CommandFailedError("Failed to restart mDNSResponder")
    success("DNS cache flushed")


def ping(args: Sequence[str]) -> int:
    host = require(args, 0, "Host", "mac network ping <host> [count]")
    count = int_in_range(arg(args, 1, str(get_settings().ping_count)), "Count", 1, 100)
    info(f"Pinging {host} ({count} packets)...")
    result = shell.run(["ping", "-c", str(count), host], capture=False, timeout=None)
    if not result.ok:
        warning(f"Ping to {host} failed")
        return 1
    success(f"{host} is reachable")
    return 0


def speed_test(args: Sequence[str]) -> None:
    info("Measuring response time...")
    started = time.monotonic()
    try:
        fetch_text(SPEED_TEST_URL)
    except (urllib.error.URLError, OSError) as exc:
        raise CommandFailedError("Speed test failed", [str(exc)]) from exc
    elapsed = time.monotonic() - started
    field("Response time", f"{elapsed * 1000:.0f} ms")
    info("For a full bandwidth test use 'networkQuality' or speedtest.net")


def renew_dhcp(args: Sequence[str]) -> None:
    _, interface = local_ip()
    interface = interface or "en0"
    info(f"Renewing DHCP lease on {interface} (administrator password may be required)...")
    if not shell.sudo(["ipconfig", "set", interface, "DHCP"]).ok:
        raise CommandFailedError(f"Failed to renew DHCP lease on {interface}")
    time.sleep(3)
    address = shell.output(["ipconfig", "getifaddr", interface])
    success("DHCP lease renewed")
    field("New IP", address or "pending")


def reset(args: Sequence[str]) -> None:
    warning("This removes network interface preferences; you will need to rejoin networks")
    if not confirm("Reset network settings?", default=False):
        info("Network reset cancelled")
        return
    result = shell.sudo(["rm", "-f", *NETWORK_PLISTS])
    if not result.ok:
        raise CommandFailedError("Failed to reset network settings")
    success("Network settings reset")
    info("Restart your Mac to apply the changes")


def locations(args: Sequence[str]) -> None:
    action = arg(args, 0, "list")
    if action == "list":
        current = shell.output(["networksetup", "-getcurrentlocation"])
        header("📍 Network Locations")
        for name in parsers.parse_locations(shell.output(["networksetup", "-listlocations"])):
            line(f"  {'* ' if name == current else '  '}{name}")
    elif action == "current":
        field("Current location", shell.output(["networksetup", "-getcurrentlocation"]) or "unknown")
    elif action == "switch":
        name = require(args, 1, "Location name", "mac network locations switch <name>")
        result = shell.run(["networksetup", "-switchtolocation", name])
        if not result.ok:
            raise CommandFailedError(f"Failed to switch to location {name}")
        success(f"Switched to location: {name}")
    else:
        raise UsageError(f"Invalid locations action: {action}", ["Usage: mac network locations [list|current|switch <name>]"])


TABLE = CommandTable(
    "network",
    [
        Command("ip", show_ip, "Show local IP address", keywords=("address", "network")),
        Command("public-ip", show_public_ip, "Show public IP and location", keywords=("address", "network")),
        Command("info", show_info, "Show network information", keywords=("network", "status", "gateway", "dns")),
        Command("flush-dns", flush_dns, "Flush the DNS cache", keywords=("dns", "cache")),
        Command("ping", ping, "Ping a host", "<host> [count]", keywords=("test",)),
        Command("speed-test", speed_test, "Measure response time", keywords=("speed", "test")),
        Command("renew-dhcp", renew_dhcp, "Renew the DHCP lease", keywords=("dhcp", "reset")),
        Command("reset", reset, "Reset network settings", keywords=("network", "dhcp")),
        Command("locations", locations, "List or switch network locations", "[list|current|switch <name>]", keywords=("network", "location")),
    ],
    examples=[
        "mac network ip",
        "mac network ping google.com 3",
        "mac network flush-dns",
    ],
    tips=[
        "Flush DNS when websites fail to resolve after a network change",
        "'mac ip' is a shortcut for 'mac network ip'",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
