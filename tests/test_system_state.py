from supermac import system_state
from supermac.system_state import ProcessUsage


def make_process(
    *,
    pid: int = 1,
    name: str = "task",
    cpu_percent: float = 0,
    memory_percent: float = 0,
    rss_bytes: int = 64 * 1024**2,
) -> ProcessUsage:
    return ProcessUsage(
        pid=pid,
        name=name,
        user="alice",
        cpu_percent=cpu_percent,
        memory_percent=memory_percent,
        rss_bytes=rss_bytes,
    )


def test_top_processes_by_cpu():
    processes = [
        make_process(pid=1, name="idle", cpu_percent=0.1),
        make_process(pid=2, name="compiler", cpu_percent=180),
        make_process(pid=3, name="browser", cpu_percent=25, memory_percent=30),
    ]
    top = system_state.top_processes(processes, "cpu", 2)
    assert [p.name for p in top] == ["compiler", "browser"]


def test_top_processes_by_memory():
    processes = [
        make_process(pid=1, name="editor", memory_percent=4),
        make_process(pid=2, name="browser", memory_percent=30),
    ]
    assert system_state.top_processes(processes, "memory", 1)[0].name == "browser"


def test_processes_above_threshold_is_strict():
    processes = [
        make_process(pid=1, name="at-threshold", cpu_percent=1.0),
        make_process(pid=2, name="busy", cpu_percent=1.5),
        make_process(pid=3, name="quiet", cpu_percent=0.2, memory_percent=12),
    ]
    assert [p.name for p in system_state.processes_above(processes, 1.0, "cpu")] == ["busy"]
    assert [p.name for p in system_state.processes_above(processes, 1.0, "memory")] == ["quiet"]


def test_kill_process_treats_missing_process_as_killed(monkeypatch):
    class Gone:
        def __init__(self, pid):
            raise system_state.psutil.NoSuchProcess(pid)

    monkeypatch.setattr(system_state.psutil, "Process", Gone)
    assert system_state.kill_process(4242)
    assert system_state.process_name(4242) is None
    assert system_state.process_command(4242) == ""


def test_kill_process_access_denied(monkeypatch):
    class Protected:
        def __init__(self, pid):
            self.pid = pid

        def kill(self):
            raise system_state.psutil.AccessDenied(self.pid)

    monkeypatch.setattr(system_state.psutil, "Process", Protected)
    assert not system_state.kill_process(1)
