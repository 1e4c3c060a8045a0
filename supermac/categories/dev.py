"""Developer tools: ports, local servers, processes and small text utilities."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
from pathlib import Path
import secrets
import shutil
import string
import sys
import tempfile
from typing import Dict, List, Optional, Sequence
import uuid

from rich import box
from rich.table import Table
from rich.text import Text

from .. import parsers, shell, system_state
from ..commands import Command, CommandTable
from ..config import get_settings
from ..errors import CommandFailedError, UsageError
from ..formatting import confirm, console, field, info, line, process_table, success, warning
from ..system_state import ProcessUsage
from ..validation import arg, choice, int_in_range, port, require

logger = logging.getLogger(__name__)

COMMON_PORTS: Dict[int, str] = {
    3000: "React/Next.js",
    3001: "React (alt)",
    4000: "Gatsby/Express",
    5000: "Flask/Express",
    5173: "Vite",
    8000: "Django/Python",
    8080: "Webpack/Tomcat",
    8888: "Jupyter",
    9000: "PHP/Node",
    9001: "SvelteKit",
}
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*()-_=+"
HOG_THRESHOLD = 1.0


def pids_on_port(number: int) -> List[int]:
    return parsers.parse_pids(shell.run(["lsof", "-ti", f":{number}"]).stdout)


def listeners() -> List[parsers.Listener]:
    found = parsers.parse_lsof_listeners(shell.run(["lsof", "-i", "-P", "-n"]).stdout)
    unique = {(listener.pid, listener.port): listener for listener in found}
    return sorted(unique.values(), key=lambda listener: (listener.port, listener.pid))


def generate_password(length: int) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def _copy(text: str) -> None:
    if shell.copy_to_clipboard(text):
        info("Copied to clipboard")


def kill_port(args: Sequence[str]) -> int:
    number = port(require(args, 0, "Port", "mac dev kill-port <port>"))
    pids = pids_on_port(number)
    if not pids:
        warning(f"No process is listening on port {number}")
        return 1
    failed = []
    for pid in pids:
        name = system_state.process_name(pid) or "unknown"
        if system_state.kill_process(pid):
            success(f"Killed {name} (PID {pid}) on port {number}")
        else:
            failed.append(pid)
    if failed:
        raise CommandFailedError(
            f"Could not kill PID {', '.join(map(str, failed))}",
            [f"Try: sudo kill -9 {' '.join(map(str, failed))}"],
        )
    return 0


def list_ports(args: Sequence[str]) -> None:
    found = listeners()
    if not found:
        info("No listening ports found")
        return
    table = Table(title="Listening Ports", box=box.SIMPLE_HEAD)
    table.add_column("Port", justify="right")
    table.add_column("Process")
    table.add_column("PID", justify="right")
    table.add_column("Address")
    table.add_column("Known as")
    for listener in found:
        table.add_row(
            str(listener.port),
            Text(listener.command),
            str(listener.pid),
            Text(listener.address),
            COMMON_PORTS.get(listener.port, ""),
            style="bold green" if listener.port in COMMON_PORTS else None,
        )
    console().print(table)


def servers(args: Sequence[str]) -> None:
    running = 0
    table = Table(title="Development Servers", box=box.SIMPLE_HEAD)
    table.add_column("Port", justify="right")
    table.add_column("Framework")
    table.add_column("Process")
    table.add_column("Command")
    for number, framework in COMMON_PORTS.items():
        for pid in pids_on_port(number):
            running += 1
            table.add_row(
                str(number),
                framework,
                Text(f"{system_state.process_name(pid) or 'unknown'} ({pid})"),
                Text(system_state.process_command(pid)[:60]),
            )
    if not running:
        info("No development servers running on common ports")
        return
    console().print(table)


def localhost(args: Sequence[str]) -> None:
    number = port(require(args, 0, "Port", "mac dev localhost <port> [protocol]"))
    protocol = arg(args, 1, "http")
    if not pids_on_port(number):
        warning(f"Nothing is listening on port {number}")
        if not confirm("Open anyway?", default=True):
            return
    url = f"{protocol}://localhost:{number}"
    if not shell.open_path(url).ok:
        raise CommandFailedError(f"Failed to open {url}")
    success(f"Opened {url}")


def serve(args: Sequence[str]) -> int:
    directory = Path(os.path.expanduser(arg(args, 0, ".")))
    if not directory.is_dir():
        raise UsageError(f"Directory not found: {directory}")
    number = port(arg(args, 1, str(get_settings().serve_port)))
    if pids_on_port(number):
        raise UsageError(f"Port {number} is already in use", [f"Free it with 'mac dev kill-port {number}'"])
    info(f"Serving {directory.resolve()} at http://localhost:{number} (Ctrl+C to stop)")
    result = shell.run([sys.executable, "-m", "http.server", str(number)], capture=False, timeout=None, cwd=str(directory))
    return result.returncode


def processes(args: Sequence[str]) -> None:
    sort_by = choice(
        arg(args, 0, "cpu"),
        {"cpu": "cpu", "memory": "memory", "mem": "memory", "all": "all"},
        "sort order",
        "mac dev processes [cpu|memory|all] [count]",
    )
    count = int_in_range(arg(args, 1, str(get_settings().process_count)), "Count", 1, 500)
    snapshot = system_state.list_processes()
    if sort_by == "all":
        selected = sorted(snapshot, key=lambda proc: proc.pid)[-count:]
    else:
        selected = system_state.top_processes(snapshot, sort_by, count)
    console().print(process_table(f"Processes ({sort_by})", selected))


def _cpu_style(proc: ProcessUsage) -> Optional[str]:
    if proc.cpu_percent > 5:
        return "red"
    if proc.cpu_percent > 2:
        return "yellow"
    return None


def _memory_style(proc: ProcessUsage) -> Optional[str]:
    if proc.memory_percent > 10:
        return "red"
    if proc.memory_percent > 5:
        return "yellow"
    return None


def cpu_hogs(args: Sequence[str]) -> None:
    hogs = system_state.processes_above(system_state.list_processes(), HOG_THRESHOLD, "cpu")
    if not hogs:
        success("No processes above 1% CPU")
        return
    console().print(process_table("CPU hogs", hogs, row_style=_cpu_style))


def memory_hogs(args: Sequence[str]) -> None:
    hogs = system_state.processes_above(system_state.list_processes(), HOG_THRESHOLD, "memory")
    if not hogs:
        success("No processes above 1% memory")
        return
    console().print(process_table("Memory hogs", hogs, row_style=_memory_style))


def json_format(args: Sequence[str]) -> None:
    path = Path(os.path.expanduser(require(args, 0, "File", "mac dev json-format <file>")))
    if not path.is_file():
        raise UsageError(f"File not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise UsageError(f"Invalid JSON in {path}", [str(exc)]) from exc
    formatted = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    handle, temp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as temp:
            temp.write(formatted)
        shutil.copymode(path, temp_name)
        os.replace(temp_name, path)
    except OSError as exc:
        os.unlink(temp_name)
        raise CommandFailedError(f"Could not write {path}", [str(exc)]) from exc
    success(f"Formatted {path}")


def base64_encode(args: Sequence[str]) -> None:
    text = require(args, 0, "Text", "mac dev base64-encode <text>")
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    line(encoded)
    _copy(encoded)


def base64_decode(args: Sequence[str]) -> None:
    text = require(args, 0, "Text", "mac dev base64-decode <text>")
    try:
        decoded = base64.b64decode(text, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise UsageError("Invalid base64 input", [str(exc)]) from exc
    line(decoded)
    _copy(decoded)


def make_uuid(args: Sequence[str]) -> None:
    value = str(uuid.uuid4())
    line(value)
    _copy(value)


def password(args: Sequence[str]) -> None:
    length = int_in_range(arg(args, 0, str(get_settings().password_length)), "Password length", 4, 128)
    value = generate_password(length)
    line(value)
    field("Length", length)
    _copy(value)


TABLE = CommandTable(
    "dev",
    [
        Command("kill-port", kill_port, "Kill the process using a port", "<port>", keywords=("port", "kill")),
        Command("list-ports", list_ports, "List listening ports", keywords=("port",)),
        Command("servers", servers, "Show running dev servers", keywords=("server", "localhost")),
        Command("localhost", localhost, "Open localhost in the browser", "<port> [protocol]", keywords=("server",)),
        Command("serve", serve, "Serve a folder over HTTP", "[dir] [port]", keywords=("server",)),
        Command("processes", processes, "List processes", "[cpu|memory|all] [count]", keywords=("process", "cpu", "memory")),
        Command("cpu-hogs", cpu_hogs, "Processes using over 1% CPU", keywords=("process", "cpu")),
        Command("memory-hogs", memory_hogs, "Processes using over 1% memory", keywords=("process", "memory")),
        Command("json-format", json_format, "Pretty-print a JSON file", "<file>", keywords=("json", "format")),
        Command("base64-encode", base64_encode, "Base64 encode text", "<text>", keywords=("base64", "encode")),
        Command("base64-decode", base64_decode, "Base64 decode text", "<text>", keywords=("base64", "decode")),
        Command("uuid", make_uuid, "Generate a UUID", keywords=("uuid",)),
        Command("password", password, "Generate a random password", "[length]", keywords=("password",)),
    ],
    examples=[
        "mac dev kill-port 3000",
        "mac dev serve ./dist 8080",
        "mac dev password 24",
    ],
    tips=[
        "'mac kp <port>' is a shortcut for kill-port",
        "Generated values are copied to the clipboard",
    ],
)


def dispatch(action: str, args: Sequence[str]) -> int:
    return TABLE.dispatch(action, args)
