from supermac.categories import dock
from supermac.cli import main


def test_size_name_buckets():
    assert dock.size_name(32) == "small"
    assert dock.size_name(40) == "small"
    assert dock.size_name(64) == "medium"
    assert dock.size_name(80) == "medium"
    assert dock.size_name(96) == "large"


def test_position_is_idempotent(fake_shell, capsys):
    assert main(["dock", "position", "l"]) == 0
    assert fake_shell.prefs[(dock.DOMAIN, "orientation")] == "left"
    assert fake_shell.ran("killall", "Dock")

    fake_shell.calls.clear()
    assert main(["dock", "position", "left"]) == 0
    assert "already on the left" in capsys.readouterr().out
    assert not fake_shell.ran("killall", "Dock")


def test_invalid_position(fake_shell, capsys):
    assert main(["dock", "position", "top"]) == 1
    assert "Invalid position: top" in capsys.readouterr().err


def test_autohide_writes_bool_and_restarts(fake_shell):
    assert main(["dock", "autohide", "on"]) == 0
    assert fake_shell.prefs[(dock.DOMAIN, "autohide")] == "1"
    assert ["defaults", "write", dock.DOMAIN, "autohide", "-bool", "true"] in fake_shell.calls
    assert fake_shell.ran("killall", "Dock")


def test_size_writes_pixels(fake_shell):
    assert main(["dock", "size", "large"]) == 0
    assert fake_shell.prefs[(dock.DOMAIN, "tilesize")] == "96"


def test_status_reports_size_bucket(fake_shell, capsys):
    fake_shell.prefs[(dock.DOMAIN, "tilesize")] = "36"
    assert main(["dock", "status"]) == 0
    assert "small (36px)" in capsys.readouterr().out


def test_reset_cancelled(fake_shell, monkeypatch, capsys):
    fake_shell.prefs[(dock.DOMAIN, "orientation")] = "left"
    monkeypatch.setattr(dock, "confirm", lambda prompt, default=False: False)
    assert main(["dock", "reset"]) == 0
    assert "cancelled" in capsys.readouterr().out
    assert fake_shell.prefs[(dock.DOMAIN, "orientation")] == "left"


def test_add_without_dockutil_warns(fake_shell, monkeypatch, tmp_path, capsys):
    (tmp_path / "Safari.app").mkdir()
    monkeypatch.setattr(dock, "APP_FOLDERS", (tmp_path,))
    assert main(["dock", "add", "safari"]) == 0
    assert "dockutil is not installed" in capsys.readouterr().out
    assert not fake_shell.ran("dockutil")


def test_add_with_dockutil(fake_shell, monkeypatch, tmp_path):
    (tmp_path / "Safari.app").mkdir()
    monkeypatch.setattr(dock, "APP_FOLDERS", (tmp_path,))
    fake_shell.tools.add("dockutil")
    assert main(["dock", "add", "Safari"]) == 0
    assert ["dockutil", "--add", str(tmp_path / "Safari.app")] in fake_shell.calls


def test_add_unknown_app(fake_shell, monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(dock, "APP_FOLDERS", (tmp_path,))
    assert main(["dock", "add", "Nope"]) == 1
    assert "Application not found: Nope" in capsys.readouterr().err
