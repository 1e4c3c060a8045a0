from supermac import __version__
from supermac.cli import main
from supermac.registry import CATEGORIES


def test_no_arguments_shows_main_help(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Usage: mac <category> <action>" in out
    for name in CATEGORIES:
        assert name in out


def test_unknown_global_option_is_a_usage_error(capsys):
    assert main(["--bogus", "wifi", "status"]) == 1
    captured = capsys.readouterr()
    assert "Unknown option: --bogus" in captured.err
    assert "--no-color" in captured.out


def test_version_word_and_flag(capsys):
    assert main(["version"]) == 0
    assert __version__ in capsys.readouterr().out
    assert main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_unknown_category_lists_valid_categories(capsys):
    assert main(["nonexistent"]) == 1
    captured = capsys.readouterr()
    assert "Unknown category: nonexistent" in captured.err
    assert "finder, wifi, network" in captured.out


def test_category_without_action_requires_action(capsys):
    assert main(["finder"]) == 1
    assert "action required" in capsys.readouterr().err.lower()


def test_unknown_action_lists_category_actions(capsys):
    assert main(["finder", "nonexistent"]) == 1
    captured = capsys.readouterr()
    assert "Unknown finder action: nonexistent" in captured.err
    assert "toggle-hidden" in captured.out
    assert "mac help finder" in captured.out


def test_category_help_variants(capsys):
    for argv in (["help", "dock"], ["dock", "help"], ["dock", "--help"], ["-h", "dock"]):
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "DOCK" in out
        assert "magnification" in out


def test_help_for_unknown_category_fails(capsys):
    assert main(["help", "nonexistent"]) == 1
    assert "Unknown category" in capsys.readouterr().err


def test_search_lists_network_commands(capsys):
    assert main(["search", "network"]) == 0
    out = capsys.readouterr().out
    assert "mac network ip" in out
    assert "mac network info" in out
    assert "mac network ping" not in out
    assert "mac dock" not in out


def test_search_is_case_insensitive(capsys):
    assert main(["search", "DNS"]) == 0
    assert "mac network flush-dns" in capsys.readouterr().out


def test_search_without_match_is_not_an_error(capsys):
    assert main(["search", "qwertyzzz"]) == 0
    assert "No commands found" in capsys.readouterr().out


def test_search_requires_term(capsys):
    assert main(["search"]) == 1
    assert "Search term required" in capsys.readouterr().err


def test_brightness_out_of_range(fake_shell, capsys):
    assert main(["display", "brightness", "150"]) == 1
    assert "Brightness must be between 0 and 100" in capsys.readouterr().err
    assert not fake_shell.ran("osascript")


def test_brightness_bounds_accepted(fake_shell):
    assert main(["display", "brightness", "0"]) == 0
    assert main(["display", "brightness", "100"]) == 0
    scripts = [call[2] for call in fake_shell.calls if call[0] == "osascript"]
    assert any("set brightness to 0.00" in script for script in scripts)
    assert any("set brightness to 1.00" in script for script in scripts)


def test_volume_shortcut_validates_range(fake_shell, capsys):
    assert main(["vol", "101"]) == 1
    assert "Volume must be between 0 and 100" in capsys.readouterr().err
    assert main(["vol", "0"]) == 0
    assert main(["vol", "100"]) == 0
    assert ["osascript", "-e", "set volume output volume 100"] in fake_shell.calls


def test_shortcut_resolves_to_category_action(fake_shell, capsys):
    fake_shell.on("ipconfig", "getifaddr", "en0", stdout="192.168.1.20\n")
    assert main(["ip"]) == 0
    assert "192.168.1.20" in capsys.readouterr().out


def test_debug_without_command_shows_diagnostics(fake_shell, capsys):
    fake_shell.tools.add("defaults")
    assert main(["debug"]) == 0
    out = capsys.readouterr().out
    assert "Config" in out
    assert "SwitchAudioSource" in out


def test_debug_prefix_runs_command(fake_shell, capsys):
    fake_shell.on("ipconfig", "getifaddr", "en0", stdout="10.0.0.5\n")
    assert main(["debug", "network", "ip"]) == 0
    assert "10.0.0.5" in capsys.readouterr().out


def test_missing_required_tool_is_reported(fake_shell, capsys):
    assert main(["audio", "output", "AirPods"]) == 1
    captured = capsys.readouterr()
    assert "SwitchAudioSource is not installed" in captured.err
    assert "brew install switchaudio-osx" in captured.out
