"""User settings loaded from ``~/.supermac/config/config.json``."""

from __future__ import annotations

from dataclasses import dataclass, fields
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_ENV = "SUPERMAC_CONFIG"
DEBUG_ENV = "SUPERMAC_DEBUG"
DEFAULT_CONFIG_PATH = Path.home() / ".supermac" / "config" / "config.json"


@dataclass
class Settings:
    debug: bool = False
    color: bool = True
    ping_count: int = 5
    password_length: int = 16
    serve_port: int = 8000
    process_count: int = 15


_settings: Optional[Settings] = None


def config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_ENV)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


def load_settings(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from disk; a missing or broken file yields the defaults."""
    env = os.environ if environ is None else environ
    path = path or config_path(env)
    raw: Dict[str, Any] = {}
    if path.is_file():
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", path, exc)
        else:
            if isinstance(loaded, dict):
                raw = loaded
            else:
                logger.warning("Ignoring config %s: expected a JSON object", path)

    settings = Settings()
    for item in fields(Settings):
        if item.name not in raw:
            continue
        value = raw[item.name]
        expected = type(getattr(settings, item.name))
        if isinstance(value, expected) and not (expected is int and isinstance(value, bool)):
            setattr(settings, item.name, value)
        else:
            logger.warning("Ignoring config key %r: expected %s", item.name, expected.__name__)

    if env.get(DEBUG_ENV) == "1":
        settings.debug = True
    return settings


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    global _settings
    _settings = settings
