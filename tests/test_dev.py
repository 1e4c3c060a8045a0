import base64
import json
import stat
import uuid

import pytest

from supermac import system_state
from supermac.categories import dev
from supermac.cli import main


@pytest.fixture
def killed(monkeypatch):
    pids = []
    monkeypatch.setattr(system_state, "process_name", lambda pid: "node")

    def kill_process(pid):
        pids.append(pid)
        return True

    monkeypatch.setattr(system_state, "kill_process", kill_process)
    return pids


def test_kill_port_kills_every_pid(fake_shell, killed, capsys):
    fake_shell.on("lsof", "-ti", ":3000", stdout="41235\n41236\n41235\n")
    assert main(["kp", "3000"]) == 0
    assert killed == [41235, 41236]
    assert "Killed node (PID 41235) on port 3000" in capsys.readouterr().out


def test_kill_port_with_nothing_listening(fake_shell, killed, capsys):
    fake_shell.on("lsof", "-ti", ":3000", returncode=1)
    assert main(["dev", "kill-port", "3000"]) == 1
    assert "No process is listening on port 3000" in capsys.readouterr().out
    assert killed == []


def test_kill_port_reports_failures(fake_shell, monkeypatch, capsys):
    fake_shell.on("lsof", "-ti", ":8080", stdout="99\n")
    monkeypatch.setattr(system_state, "process_name", lambda pid: None)
    monkeypatch.setattr(system_state, "kill_process", lambda pid: False)
    assert main(["dev", "kill-port", "8080"]) == 1
    err = capsys.readouterr()
    assert "Could not kill PID 99" in err.err
    assert "sudo kill -9 99" in err.out


@pytest.mark.parametrize("value", ["0", "65536", "abc", "-1"])
def test_kill_port_rejects_invalid_ports(fake_shell, killed, capsys, value):
    assert main(["dev", "kill-port", value]) == 1
    assert "Port must be between 1 and 65535" in capsys.readouterr().err
    assert not fake_shell.ran("lsof")


def test_list_ports_marks_known_ports(fake_shell, capsys):
    fake_shell.on(
        "lsof",
        "-i",
        "-P",
        "-n",
        stdout=(
            "COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME\n"
            "node 41235 alice 23u IPv6 0x1 0t0 TCP *:3000 (LISTEN)\n"
            "node 41235 alice 24u IPv4 0x2 0t0 TCP *:3000 (LISTEN)\n"
        ),
    )
    assert main(["dev", "list-ports"]) == 0
    out = capsys.readouterr().out
    assert "React/Next.js" in out
    assert out.count("41235") == 1


def test_password_length(fake_shell, capsys):
    assert main(["dev", "password", "24"]) == 0
    password = capsys.readouterr().out.splitlines()[0]
    assert len(password) == 24
    assert set(password) <= set(dev.PASSWORD_ALPHABET)


def test_password_length_bounds(fake_shell, capsys):
    assert main(["dev", "password", "3"]) == 1
    assert "Password length must be between 4 and 128" in capsys.readouterr().err


def test_password_copied_when_pbcopy_exists(fake_shell):
    fake_shell.tools.add("pbcopy")
    assert main(["dev", "password"]) == 0
    assert fake_shell.ran("pbcopy")


def test_base64_encode_and_decode(fake_shell, capsys):
    assert main(["dev", "base64-encode", "hello world"]) == 0
    assert capsys.readouterr().out.splitlines()[0] == base64.b64encode(b"hello world").decode()
    assert main(["dev", "base64-decode", "aGVsbG8gd29ybGQ="]) == 0
    assert capsys.readouterr().out.splitlines()[0] == "hello world"


def test_base64_decode_rejects_garbage(fake_shell, capsys):
    assert main(["dev", "base64-decode", "not base64!"]) == 1
    assert "Invalid base64 input" in capsys.readouterr().err


def test_uuid(fake_shell, capsys):
    assert main(["dev", "uuid"]) == 0
    value = capsys.readouterr().out.splitlines()[0]
    assert uuid.UUID(value).version == 4


def test_json_format_rewrites_file(fake_shell, tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"b": [1, 2], "a": "é"}', encoding="utf-8")
    assert main(["dev", "json-format", str(path)]) == 0
    text = path.read_text(encoding="utf-8")
    assert text == '{\n  "b": [\n    1,\n    2\n  ],\n  "a": "é"\n}\n'
    assert json.loads(text) == {"b": [1, 2], "a": "é"}
    assert [p.name for p in tmp_path.iterdir()] == ["data.json"]


def test_json_format_leaves_invalid_file_untouched(fake_shell, tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert main(["dev", "json-format", str(path)]) == 1
    assert "Invalid JSON in" in capsys.readouterr().err
    assert path.read_text(encoding="utf-8") == "{not json"


def test_serve_refuses_busy_port(fake_shell, tmp_path, capsys):
    fake_shell.on("lsof", "-ti", ":8000", stdout="123\n")
    assert main(["dev", "serve", str(tmp_path)]) == 1
    assert "Port 8000 is already in use" in capsys.readouterr().err


def test_json_format_keeps_file_mode(fake_shell, tmp_path):
    path = tmp_path / "shared.json"
    path.write_text('{"a":1}', encoding="utf-8")
    path.chmod(0o644)
    assert main(["dev", "json-format", str(path)]) == 0
    assert stat.S_IMODE(path.stat().st_mode) == 0o644
    assert path.read_text(encoding="utf-8") == '{\n  "a": 1\n}\n'


def test_json_format_removes_temp_file_when_write_fails(fake_shell, monkeypatch, tmp_path, capsys):
    path = tmp_path / "data.json"
    path.write_text('{"a":1}', encoding="utf-8")

    def fail_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(dev.os, "replace", fail_replace)
    assert main(["dev", "json-format", str(path)]) == 1
    assert "Could not write" in capsys.readouterr().err
    assert [p.name for p in tmp_path.iterdir()] == ["data.json"]
    assert path.read_text(encoding="utf-8") == '{"a":1}'
