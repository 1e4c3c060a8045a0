"""Process, CPU and disk state read through psutil."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import os
import time
from typing import Iterable, List, Optional, Tuple

import psutil

logger = logging.getLogger(__name__)


@dataclass
class ProcessUsage:
    pid: int
    name: str
    user: str
    cpu_percent: float
    memory_percent: float
    rss_bytes: int


@dataclass
class DiskUsage:
    mount_point: str
    total: int
    used: int
    free: int
    percent: float


@dataclass
class CpuSummary:
    physical_cores: int
    logical_cores: int
    user_percent: float
    system_percent: float
    idle_percent: float
    load_avg: Tuple[float, float, float]


def list_processes(sample_interval: float = 0.5) -> List[ProcessUsage]:
    """Snapshot all processes with CPU usage sampled over ``sample_interval`` seconds."""
    processes = list(psutil.process_iter())
    _prime_cpu_percent(processes, sample_interval)
    return _process_usage(processes)


def top_processes(processes: Iterable[ProcessUsage], sort_by: str = "cpu", count: int = 10) -> List[ProcessUsage]:
    return sorted(processes, key=lambda p: _sort_value(p, sort_by), reverse=True)[:count]


def processes_above(
    processes: Iterable[ProcessUsage], threshold: float, sort_by: str = "cpu", count: int = 10
) -> List[ProcessUsage]:
    """Processes whose CPU or memory percentage is strictly above ``threshold``."""
    selected = [p for p in processes if _sort_value(p, sort_by) > threshold]
    return top_processes(selected, sort_by, count)


def process_name(pid: int) -> Optional[str]:
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return None


def process_command(pid: int) -> str:
    try:
        return " ".join(psutil.Process(pid).cmdline())
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return ""


def kill_process(pid: int) -> bool:
    """Send SIGKILL; a process that already exited counts as killed."""
    try:
        psutil.Process(pid).kill()
    except psutil.NoSuchProcess:
        return True
    except psutil.AccessDenied:
        logger.debug("Access denied killing pid %s", pid)
        return False
    return True


def is_running(name: str) -> bool:
    for proc in psutil.process_iter(["name"]):
        if proc.info.get("name") == name:
            return True
    return False


def disk_usage(path: str = "/") -> DiskUsage:
    usage = psutil.disk_usage(path)
    return DiskUsage(mount_point=path, total=usage.total, used=usage.used, free=usage.free, percent=usage.percent)


def load_average() -> Tuple[float, float, float]:
    return os.getloadavg() if hasattr(os, "getloadavg") else (0.0, 0.0, 0.0)


def boot_time() -> datetime:
    return datetime.fromtimestamp(psutil.boot_time())


def uptime_seconds() -> float:
    return time.time() - psutil.boot_time()


def cpu_summary(interval: float = 0.3) -> CpuSummary:
    times = psutil.cpu_times_percent(interval=interval)
    return CpuSummary(
        physical_cores=psutil.cpu_count(logical=False) or 0,
        logical_cores=psutil.cpu_count() or 0,
        user_percent=times.user,
        system_percent=times.system,
        idle_percent=times.idle,
        load_avg=load_average(),
    )


def _sort_value(proc: ProcessUsage, sort_by: str) -> float:
    return proc.memory_percent if sort_by == "memory" else proc.cpu_percent


def _prime_cpu_percent(processes: Iterable[psutil.Process], interval: float) -> None:
    for proc in processes:
        try:
            proc.cpu_percent(None)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    time.sleep(interval)


def _process_usage(processes: Iterable[psutil.Process]) -> List[ProcessUsage]:
    usage: List[ProcessUsage] = []
    for proc in processes:
        try:
            with proc.oneshot():
                try:
                    user = proc.username()
                except psutil.AccessDenied:
                    user = "?"
                usage.append(
                    ProcessUsage(
                        pid=proc.pid,
                        name=proc.name(),
                        user=user,
                        cpu_percent=proc.cpu_percent(None),
                        memory_percent=proc.memory_percent(),
                        rss_bytes=proc.memory_info().rss,
                    )
                )
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return usage
