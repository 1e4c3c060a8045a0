import json
import logging

from supermac import config
from supermac.config import Settings, load_settings


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "absent.json", environ={}) == Settings()


def test_values_loaded_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"ping_count": 3, "color": False, "unknown": "ignored"}))
    settings = load_settings(path, environ={})
    assert settings.ping_count == 3
    assert settings.color is False
    assert settings.password_length == 16


def test_invalid_json_falls_back_to_defaults(tmp_path, caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("supermac"), "propagate", True)
    path = tmp_path / "config.json"
    path.write_text("{broken")
    with caplog.at_level(logging.WARNING, logger="supermac.config"):
        assert load_settings(path, environ={}) == Settings()
    assert "Ignoring unreadable config" in caplog.text


def test_non_object_json_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]")
    assert load_settings(path, environ={}) == Settings()


def test_wrong_types_are_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"ping_count": "ten", "serve_port": True, "debug": 1, "process_count": 30}))
    settings = load_settings(path, environ={})
    assert settings.ping_count == 5
    assert settings.serve_port == 8000
    assert settings.debug is False
    assert settings.process_count == 30


def test_debug_environment_variable(tmp_path):
    assert load_settings(tmp_path / "absent.json", environ={"SUPERMAC_DEBUG": "1"}).debug
    assert not load_settings(tmp_path / "absent.json", environ={"SUPERMAC_DEBUG": "0"}).debug


def test_config_path_override(tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"password_length": 32}))
    environ = {"SUPERMAC_CONFIG": str(path)}
    assert config.config_path(environ) == path
    assert load_settings(environ=environ).password_length == 32


def test_default_config_path():
    assert config.config_path({}) == config.DEFAULT_CONFIG_PATH
    assert config.DEFAULT_CONFIG_PATH.parts[-3:] == (".supermac", "config", "config.json")
