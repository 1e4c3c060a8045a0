"""Console-friendly formatting utilities."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.prompt import Confirm, InvalidResponse
from rich.table import Table
from rich.text import Text

_color = True
_console: Optional[Console] = None
_err_console: Optional[Console] = None


def configure(color: bool = True) -> None:
    """Reset the shared consoles; colors are also dropped when output is not a terminal."""
    global _color, _console, _err_console
    _color = color
    _console = None
    _err_console = None


def console() -> Console:
    global _console
    if _console is None:
        _console = Console(soft_wrap=True, highlight=False, no_color=not _color)
    return _console


def err_console() -> Console:
    global _err_console
    if _err_console is None:
        _err_console = Console(stderr=True, soft_wrap=True, highlight=False, no_color=not _color)
    return _err_console


def format_bytes(num: float) -> str:
    suffixes = ["B", "KiB", "MiB", "GiB", "TiB"]
    value = float(num)
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}"
        value /= 1024
    return f"{value:.1f} TiB"


def format_duration(seconds: float) -> str:
    minutes, _ = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    parts = []
    if days:
        parts.append(f"{days} day{'s' if days != 1 else ''}")
    if hours:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    return ", ".join(parts)


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    lines = []
    lines.append(_format_row(headers, widths))
    lines.append(_format_row(["-" * w for w in widths], widths))
    for row in rows:
        lines.append(_format_row(row, widths))
    return "\n".join(lines)


def success(message: str) -> None:
    console().print(Text.assemble(("✓ ", "bold green"), message))


def error(message: str) -> None:
    err_console().print(Text.assemble(("✗ ", "bold red"), message))


def info(message: str) -> None:
    console().print(Text.assemble(("ℹ ", "bold blue"), message))


def warning(message: str) -> None:
    console().print(Text.assemble(("⚠ ", "bold yellow"), message))


def header(title: str) -> None:
    console().print(Text(title, style="bold magenta"))
    console().print()


def subheader(title: str) -> None:
    console().print()
    console().print(Text(title, style="bold cyan"))


def field(label: str, value: Any, style: str = "bold") -> None:
    console().print(Text.assemble("  ", (f"{label}:", style), " ", str(value)))


def line(message: str = "", style: Optional[str] = None) -> None:
    console().print(Text(message, style=style or ""))


def bullet(message: str) -> None:
    console().print(Text(f"  • {message}"))


def process_table(
    title: str, processes: Iterable[Any], row_style: Optional[Callable[[Any], Optional[str]]] = None
) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("PID", justify="right")
    table.add_column("Process")
    table.add_column("User")
    table.add_column("CPU", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Resident", justify="right")

    rows = list(processes)
    if not rows:
        table.add_row("-", "No process data", "-", "-", "-", "-")
        return table

    for proc in rows:
        table.add_row(
            str(proc.pid),
            Text(proc.name),
            Text(proc.user),
            f"{proc.cpu_percent:.1f}%",
            f"{proc.memory_percent:.1f}%",
            format_bytes(proc.rss_bytes),
            style=row_style(proc) if row_style else None,
        )
    return table


class YesNoConfirm(Confirm):
    """Confirm prompt that also accepts ``yes`` and ``no`` spelled out."""

    choices = ["y", "n"]

    def process_response(self, value: str) -> bool:
        answer = value.strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        raise InvalidResponse("[prompt.invalid]Please answer yes or no")


def confirm(prompt: str, default: bool = False) -> bool:
    """Ask a yes/no question; an empty answer returns ``default``."""
    return YesNoConfirm.ask(Text(prompt), default=default, console=console())


def _format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    padded = [cell.ljust(width) for cell, width in zip(row, widths)]
    return " | ".join(padded)
