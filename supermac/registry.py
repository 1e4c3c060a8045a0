"""Static category registry and global shortcut table."""

from __future__ import annotations

from dataclasses import dataclass
import importlib
import logging
from types import ModuleType
from typing import Dict, List, Optional, Tuple

from .commands import Command, CommandTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Category:
    name: str
    icon: str
    description: str

    @property
    def module_path(self) -> str:
        return f"supermac.categories.{self.name}"


CATEGORIES: Dict[str, Category] = {
    category.name: category
    for category in (
        Category("finder", "📁", "File visibility and Finder management"),
        Category("wifi", "🌐", "WiFi control and management"),
        Category("network", "📡", "Network information and troubleshooting"),
        Category("system", "🖥️", "System information and maintenance"),
        Category("dev", "💻", "Developer tools and utilities"),
        Category("display", "🖥️", "Display and appearance settings"),
        Category("dock", "🚢", "Dock management and positioning"),
        Category("audio", "🔊", "Audio control and device management"),
        Category("screenshot", "📸", "Screenshot settings and capture"),
    )
}

SHORTCUTS: Dict[str, Tuple[str, str]] = {
    "ip": ("network", "ip"),
    "cleanup": ("system", "cleanup"),
    "dark": ("display", "dark-mode"),
    "light": ("display", "light-mode"),
    "kp": ("dev", "kill-port"),
    "restart-finder": ("finder", "restart"),
    "rf": ("finder", "restart"),
    "toggle-hidden": ("finder", "toggle-hidden"),
    "th": ("finder", "toggle-hidden"),
    "vol": ("audio", "volume"),
}


def get_category(name: str) -> Optional[Category]:
    return CATEGORIES.get(name)


def resolve_shortcut(name: str) -> Optional[Tuple[str, str]]:
    return SHORTCUTS.get(name)


def load_module(name: str) -> ModuleType:
    """Import a category module on first use."""
    category = CATEGORIES[name]
    logger.debug("Loading module: %s", category.module_path)
    return importlib.import_module(category.module_path)


def load_table(name: str) -> CommandTable:
    return load_module(name).TABLE


def search(term: str) -> List[Tuple[str, Command]]:
    """Matching commands across every category, in registry order."""
    matches: List[Tuple[str, Command]] = []
    for name in CATEGORIES:
        for command in load_table(name).search(term):
            matches.append((name, command))
    return matches
