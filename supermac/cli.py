"""Entry point for the ``mac`` command line tool."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from .config import get_settings
from .errors import SuperMacError, UsageError
from .formatting import configure, error, info, line
from .help import show_category_help, show_debug_info, show_main_help, show_search, show_version
from .logging_setup import init_logger
from .registry import CATEGORIES, get_category, load_module, resolve_shortcut

logger = logging.getLogger(__name__)

HELP_WORDS = ("help", "-h", "--help")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac",
        description="Shortcuts for everyday macOS settings and diagnostics.",
        add_help=False,
    )
    parser.add_argument("--debug", action="store_true", help="log every OS command that runs")
    parser.add_argument("-v", "--version", action="store_true", help="show version information")
    parser.add_argument("-h", "--help", action="store_true", help="show help")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    flags, rest = _split_global_flags(list(sys.argv[1:] if argv is None else argv))
    args, unknown = build_parser().parse_known_args(flags)

    settings = get_settings()
    debug = args.debug or settings.debug
    if rest[:1] == ["debug"]:
        debug = True
    configure(color=settings.color and not args.no_color)
    init_logger(debug=debug, color=settings.color and not args.no_color)

    try:
        if unknown:
            raise UsageError(
                f"Unknown option: {unknown[0]}",
                ["Global options: --debug, --version, --help, --no-color"],
            )
        if args.version:
            show_version()
            return 0
        if args.help or not rest:
            if args.help and rest:
                show_category_help(rest[0])
            else:
                show_main_help()
            return 0
        return _run(rest)
    except SuperMacError as exc:
        _report(exc)
        return exc.exit_code
    except KeyboardInterrupt:
        line()
        info("Cancelled")
        return 130


def run() -> None:
    sys.exit(main())


def _run(tokens: List[str]) -> int:
    head, tail = tokens[0], tokens[1:]

    if head in HELP_WORDS:
        if tail:
            show_category_help(tail[0])
        else:
            show_main_help()
        return 0
    if head == "version":
        show_version()
        return 0
    if head == "search":
        if not tail:
            raise UsageError("Search term required", ["Usage: mac search <term>"])
        show_search(" ".join(tail))
        return 0
    if head == "debug":
        if not tail:
            show_debug_info()
            return 0
        logger.debug("Debug mode enabled")
        return _run(tail)

    shortcut = resolve_shortcut(head)
    if shortcut is not None:
        category, action = shortcut
        logger.debug("Shortcut %s -> %s %s", head, category, action)
        return _dispatch(category, action, tail)

    if get_category(head) is None:
        raise UsageError(
            f"Unknown category: {head}",
            [f"Available categories: {', '.join(CATEGORIES)}", "Use 'mac help' to see all commands"],
        )
    if not tail:
        raise UsageError(
            f"Action required for '{head}'",
            [f"Use 'mac help {head}' to see available actions"],
        )
    return _dispatch(head, tail[0], tail[1:])


def _dispatch(category: str, action: str, args: Sequence[str]) -> int:
    if sys.platform != "darwin":
        logger.warning("SuperMac drives macOS tools; running on %s", sys.platform)
    module = load_module(category)
    return module.dispatch(action, list(args))


def _split_global_flags(argv: List[str]) -> Tuple[List[str], List[str]]:
    index = 0
    while index < len(argv) and argv[index].startswith("-"):
        index += 1
    return argv[:index], argv[index:]


def _report(exc: SuperMacError) -> None:
    error(exc.message)
    for hint in exc.hints:
        info(hint)


if __name__ == "__main__":
    run()
