"""Help screens, search results, version banner and debug diagnostics."""

from __future__ import annotations

import platform
import sys

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__, shell
from .config import config_path, get_settings
from .errors import UsageError
from .formatting import console, info, line, render_table
from .registry import CATEGORIES, SHORTCUTS, get_category, load_table, search

AUTHOR = "CosmoLabs"
EXAMPLES = [
    "mac finder toggle-hidden",
    "mac wifi status",
    "mac display brightness 60",
    "mac dev kill-port 3000",
    "mac search dns",
]
DIAGNOSTIC_TOOLS = [
    "defaults",
    "osascript",
    "networksetup",
    "pmset",
    "system_profiler",
    "lsof",
    "screencapture",
    "SwitchAudioSource",
    "dockutil",
]


def show_banner() -> None:
    console().print(
        Panel(Text(f"🚀 SuperMac v{__version__}\nBuilt by {AUTHOR}", justify="center"), style="bold cyan", expand=False)
    )


def show_version() -> None:
    show_banner()
    line(f"Python {platform.python_version()} on {platform.system()} {platform.machine()}")
    mac_version = platform.mac_ver()[0]
    if mac_version:
        line(f"macOS {mac_version}")


def show_main_help() -> None:
    show_banner()
    line()
    line("Usage: mac <category> <action> [arguments]", style="bold")
    line()

    categories = Table(title="Categories", box=box.SIMPLE_HEAD, title_justify="left")
    categories.add_column("")
    categories.add_column("Category", style="bold cyan")
    categories.add_column("Description")
    for category in CATEGORIES.values():
        categories.add_row(category.icon, Text(category.name), Text(category.description))
    console().print(categories)

    shortcuts = Table(title="Shortcuts", box=box.SIMPLE_HEAD, title_justify="left")
    shortcuts.add_column("Shortcut", style="bold cyan")
    shortcuts.add_column("Runs")
    for alias, (category, action) in SHORTCUTS.items():
        shortcuts.add_row(Text(f"mac {alias}"), Text(f"mac {category} {action}"))
    console().print(shortcuts)

    meta = Table(title="More", box=box.SIMPLE_HEAD, title_justify="left")
    meta.add_column("Command", style="bold cyan")
    meta.add_column("Description")
    meta.add_row(Text("mac help <category>"), Text("Show the actions of a category"))
    meta.add_row(Text("mac search <term>"), Text("Find commands by keyword"))
    meta.add_row(Text("mac version"), Text("Show version information"))
    meta.add_row(Text("mac debug [command]"), Text("Show diagnostics or run a command with debug logging"))
    console().print(meta)

    line("Examples:", style="bold")
    for example in EXAMPLES:
        line(f"  {example}")


def show_category_help(name: str) -> None:
    category = get_category(name)
    if category is None:
        raise UsageError(
            f"Unknown category: {name}", [f"Available categories: {', '.join(CATEGORIES)}"]
        )
    table = load_table(name)

    rows = Table(show_header=False, box=None, padding=(0, 2))
    rows.add_column(style="bold cyan", no_wrap=True)
    rows.add_column()
    for command in table.commands:
        rows.add_row(Text(command.signature), Text(command.description))
    console().print(
        Panel(
            rows,
            title=Text(f"{category.icon} {category.name.upper()}", style="bold"),
            title_align="left",
            subtitle=Text(category.description),
            subtitle_align="left",
            box=box.ROUNDED,
            border_style="magenta",
            expand=False,
        )
    )

    if table.examples:
        line()
        line("Examples:", style="bold")
        for example in table.examples:
            line(f"  {example}")
    if table.tips:
        line()
        line("Tips:", style="bold")
        for tip in table.tips:
            line(f"  • {tip}")


def show_search(term: str) -> int:
    """Print matching commands and return how many were found."""
    matches = search(term)
    if not matches:
        info(f"No commands found matching '{term}'")
        line("Use 'mac help' to see all categories")
        return 0
    line(f"🔍 Commands matching '{term}':", style="bold magenta")
    line()
    rows = [[f"mac {category} {command.signature}", command.description] for category, command in matches]
    line(render_table(["Command", "Description"], rows))
    return len(matches)


def show_debug_info() -> None:
    settings = get_settings()
    show_banner()
    details = Table(show_header=False, box=box.ROUNDED)
    details.add_column(style="bold")
    details.add_column()
    details.add_row("Version", __version__)
    details.add_row("Python", Text(f"{platform.python_version()} ({sys.executable})"))
    details.add_row("Platform", Text(platform.platform()))
    details.add_row("Config", Text(str(config_path())))
    details.add_row("Debug", "on" if settings.debug else "off")
    console().print(details)

    tools = Table(title="Tools", box=box.SIMPLE_HEAD, title_justify="left")
    tools.add_column("Tool")
    tools.add_column("Available")
    for tool in DIAGNOSTIC_TOOLS:
        available = shell.command_exists(tool)
        tools.add_row(Text(tool), Text("yes" if available else "no", style="green" if available else "yellow"))
    console().print(tools)
