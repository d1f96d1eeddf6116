"""Process table snapshots and process-tree queries via ps."""

from __future__ import annotations

from collections import deque
import logging
import subprocess

from .config import NO_TTY_VALUES
from .models import (
    ChildIndex,
    ProcessRecord,
    ProcessSnapshot,
    ProcessUsage,
    TerminalProcess,
)

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = "pid,ppid,%cpu,%mem,args"
TERMINAL_FIELDS = "pid,ppid,tty,args"


def _run_ps(fields: str, timeout: float = 5) -> str | None:
    """Run ``ps -eo <fields>`` and return stdout, or None on any failure."""
    try:
        r = subprocess.run(
            ["ps", "-eo", fields],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
        logger.debug("ps -eo %s failed: %s", fields, exc)
        return None
    if r.returncode != 0:
        logger.debug("ps -eo %s exited %d", fields, r.returncode)
        return None
    return r.stdout


def _to_float(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        return 0.0


def parse_snapshot(output: str) -> ProcessSnapshot:
    """Parse ``ps -eo pid,ppid,%cpu,%mem,args`` output (header included)."""
    snapshot: ProcessSnapshot = {}
    for line in output.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 5:
            continue
        record = ProcessRecord(
            pid=fields[0],
            parent_pid=fields[1],
            cpu_percent=_to_float(fields[2]),
            mem_percent=_to_float(fields[3]),
            command_line=" ".join(fields[4:]),
        )
        snapshot[record.pid] = record
    return snapshot


def capture_snapshot(timeout: float = 5) -> ProcessSnapshot:
    """Capture the whole process table in one ps invocation.

    Returns an empty snapshot when ps is unavailable, so callers degrade to
    "nothing matched" instead of failing.
    """
    output = _run_ps(SNAPSHOT_FIELDS, timeout=timeout)
    if output is None:
        return {}
    return parse_snapshot(output)


def build_child_index(snapshot: ProcessSnapshot) -> ChildIndex:
    """Group snapshot records by parent pid, preserving snapshot order."""
    index: ChildIndex = {}
    for record in snapshot.values():
        index.setdefault(record.parent_pid, []).append(record)
    return index


def has_descendant_matching(
    root_pid: str,
    index: ChildIndex,
    signature: str,
) -> bool:
    """Return True if any descendant of root_pid mentions signature.

    Breadth-first over the child index. The root itself is not tested. A
    visited set keeps corrupted parent links (cycles) from looping forever.
    """
    if not root_pid or not signature:
        return False
    needle = signature.lower()
    queue: deque[str] = deque([root_pid])
    visited: set[str] = set()
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for child in index.get(current, []):
            if needle in child.command_line.lower():
                return True
            queue.append(child.pid)
    return False


def aggregate_usage(
    root_pid: str,
    snapshot: ProcessSnapshot,
    index: ChildIndex,
) -> ProcessUsage:
    """Sum CPU% and MEM% for root_pid and all of its descendants."""
    usage = ProcessUsage()
    if not root_pid:
        return usage
    queue: deque[str] = deque([root_pid])
    visited: set[str] = set()
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        record = snapshot.get(current)
        if record is not None:
            usage.cpu_percent += record.cpu_percent
            usage.mem_percent += record.mem_percent
        queue.extend(child.pid for child in index.get(current, []))
    return usage


def parse_terminal_processes(output: str) -> list[TerminalProcess]:
    """Parse ``ps -eo pid,ppid,tty,args`` output (header included)."""
    procs: list[TerminalProcess] = []
    for line in output.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 4:
            continue
        procs.append(TerminalProcess(
            pid=fields[0],
            parent_pid=fields[1],
            tty=fields[2],
            command_line=" ".join(fields[3:]),
        ))
    return procs


def list_terminal_processes(timeout: float = 5) -> list[TerminalProcess] | None:
    """List every process with its controlling tty.

    None means the listing itself failed, which is different from an empty
    process list.
    """
    output = _run_ps(TERMINAL_FIELDS, timeout=timeout)
    if output is None:
        return None
    return parse_terminal_processes(output)


def executable_name(command_line: str) -> str:
    """Base name of the executable in a command line."""
    parts = command_line.split(maxsplit=1)
    if not parts:
        return ""
    return parts[0].rsplit("/", 1)[-1]


def has_terminal(tty: str) -> bool:
    return tty.strip() not in NO_TTY_VALUES
