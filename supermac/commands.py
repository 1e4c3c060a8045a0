"""Per-category command tables: dispatch, help rows and keyword search."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .errors import UsageError

logger = logging.getLogger(__name__)

HELP_ACTIONS = ("help", "-h", "--help")

Handler = Callable[[Sequence[str]], Optional[int]]


@dataclass(frozen=True)
class Command:
    name: str
    handler: Handler
    description: str
    usage: str = ""
    aliases: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name} {self.usage}".strip()

    def terms(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases, *self.keywords)


@dataclass
class CommandTable:
    category: str
    commands: List[Command]
    examples: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._lookup: Dict[str, Command] = {}
        for command in self.commands:
            self._lookup[command.name] = command
            for alias in command.aliases:
                self._lookup[alias] = command

    @property
    def action_names(self) -> List[str]:
        return [command.name for command in self.commands]

    def get(self, action: str) -> Optional[Command]:
        return self._lookup.get(action)

    def search(self, term: str) -> List[Command]:
        """Commands with the term inside their name, aliases or keywords."""
        needle = term.lower()
        return [
            command
            for command in self.commands
            if any(needle in candidate.lower() for candidate in command.terms())
        ]

    def dispatch(self, action: str, args: Sequence[str]) -> int:
        if action in HELP_ACTIONS:
            from .help import show_category_help

            show_category_help(self.category)
            return 0
        command = self.get(action)
        if command is None:
            raise UsageError(
                f"Unknown {self.category} action: {action}",
                [
                    f"Available actions: {', '.join(self.action_names)}",
                    f"Use 'mac help {self.category}' for detailed help",
                ],
            )
        logger.debug("Dispatching %s %s with %s", self.category, command.name, list(args))
        code = command.handler(args)
        return 0 if code is None else code
