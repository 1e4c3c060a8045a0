import pytest

from supermac.categories import wifi
from supermac.cli import main
from supermac.errors import CommandFailedError, UsageError
from supermac.shell import CommandResult

PORTS = "Hardware Port: Wi-Fi\nDevice: en0\nEthernet Address: a4:83:e7:11:22:33\n"


@pytest.fixture
def radio(fake_shell):
    state = {"power": "On"}
    fake_shell.on("networksetup", "-listallhardwareports", stdout=PORTS)
    fake_shell.on("networksetup", "-getairportnetwork", "en0", stdout="Current Wi-Fi Network: HomeNet\n")

    def get_power(argv):
        return CommandResult(argv, 0, f"Wi-Fi Power (en0): {state['power']}\n")

    def set_power(argv):
        state["power"] = "On" if argv[-1] == "on" else "Off"
        return CommandResult(argv, 0)

    fake_shell.handle("networksetup", "-getairportpower", "en0", handler=get_power)
    fake_shell.handle("networksetup", "-setairportpower", "en0", "on", handler=set_power)
    fake_shell.handle("networksetup", "-setairportpower", "en0", "off", handler=set_power)
    return state


def test_toggle_twice_restores_power(radio, capsys):
    assert main(["wifi", "toggle"]) == 0
    assert radio["power"] == "Off"
    assert "WiFi is off" in capsys.readouterr().out

    assert main(["wifi", "toggle"]) == 0
    assert radio["power"] == "On"
    out = capsys.readouterr().out
    assert "WiFi is on" in out
    assert "HomeNet" in out


def test_on_is_idempotent(radio, fake_shell, capsys):
    assert main(["wifi", "on"]) == 0
    assert "already on" in capsys.readouterr().out
    assert not fake_shell.ran("networksetup", "-setairportpower")


def test_enable_alias(radio):
    radio["power"] = "Off"
    assert main(["wifi", "enable"]) == 0
    assert radio["power"] == "On"


def test_on_times_out_when_radio_never_comes_up(fake_shell):
    fake_shell.on("networksetup", "-listallhardwareports", stdout=PORTS)
    fake_shell.on("networksetup", "-getairportpower", "en0", stdout="Wi-Fi Power (en0): Off\n")
    with pytest.raises(CommandFailedError) as excinfo:
        wifi.on([])
    assert "did not turn on" in excinfo.value.message
    polls = [call for call in fake_shell.calls if call[:2] == ["networksetup", "-getairportpower"]]
    assert len(polls) == 1 + wifi.ON_ATTEMPTS


def test_toggle_with_unknown_state_fails(fake_shell):
    fake_shell.on("networksetup", "-listallhardwareports", stdout=PORTS)
    fake_shell.on("networksetup", "-getairportpower", "en0", stdout="garbage")
    with pytest.raises(CommandFailedError):
        wifi.toggle([])


def test_missing_interface(fake_shell, capsys):
    assert main(["wifi", "status"]) == 1
    assert "WiFi interface not found" in capsys.readouterr().err


def test_scan_requires_power(radio):
    radio["power"] = "Off"
    with pytest.raises(UsageError):
        wifi.scan([])


def test_scan_falls_back_to_saved_networks(radio, fake_shell, monkeypatch, capsys):
    monkeypatch.setattr(wifi, "airport_path", lambda: None)
    fake_shell.on(
        "networksetup", "-listpreferredwirelessnetworks", "en0", stdout="Preferred networks on en0:\n\tHomeNet\n"
    )
    wifi.scan([])
    out = capsys.readouterr().out
    assert "unavailable" in out
    assert "HomeNet" in out


def test_connect_reports_join_failure(radio, fake_shell):
    fake_shell.on(
        "networksetup", "-setairportnetwork", "en0", "Cafe", stdout="Could not find network Cafe.\n"
    )
    with pytest.raises(CommandFailedError):
        wifi.connect(["Cafe"])


def test_signal_quality_bands():
    assert wifi.signal_quality(-45) == "Excellent"
    assert wifi.signal_quality(-60) == "Good"
    assert wifi.signal_quality(-70) == "Fair"
    assert wifi.signal_quality(-85) == "Weak"
