"""Core data types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import time


class Status(str, Enum):
    ACTIVE = "active"
    IDLE = "idle"
    WAITING = "waiting"
    TERMINAL = "terminal"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS: dict[Status, str] = {
    Status.ACTIVE: "● active",
    Status.IDLE: "○ idle",
    Status.WAITING: "◎ waiting",
    Status.TERMINAL: "⊘ terminal",
    Status.UNKNOWN: "? unknown",
}


@dataclass(frozen=True)
class ProcessRecord:
    """One row of the process table, valid for a single poll tick."""

    pid: str
    parent_pid: str
    cpu_percent: float = 0.0
    mem_percent: float = 0.0
    command_line: str = ""


# pid -> record, and parent pid -> children in snapshot order
ProcessSnapshot = dict[str, ProcessRecord]
ChildIndex = dict[str, list[ProcessRecord]]


@dataclass
class ProcessUsage:
    cpu_percent: float = 0.0
    mem_percent: float = 0.0


@dataclass
class RawTmuxSession:
    name: str
    created: float = 0.0       # unix timestamp, 0 when unknown
    attached: bool = False
    windows: int = 0
    activity: float = 0.0      # unix timestamp, 0 when unknown
    path: str = ""


@dataclass(frozen=True)
class TerminalProcess:
    pid: str
    parent_pid: str
    tty: str
    command_line: str


@dataclass
class Session:
    name: str
    project: str = ""
    status: Status = Status.UNKNOWN
    started_at: float = 0.0
    last_activity_at: float = 0.0
    attached: bool = False
    pid: str = ""
    cpu_percent: float = 0.0
    mem_percent: float = 0.0
    path: str = ""
    managed: bool = True       # False = bare terminal process, read-only

    @property
    def status_label(self) -> str:
        return self.status.label

    def uptime(self, now: float | None = None) -> str:
        """Human-readable age of the session (``45s``, ``3h5m``, ``2d4h``)."""
        if not self.started_at:
            return "-"
        if now is None:
            now = time.time()
        secs = max(0, int(now - self.started_at))
        if secs < 60:
            return f"{secs}s"
        if secs < 3600:
            return f"{secs // 60}m"
        if secs < 86400:
            return f"{secs // 3600}h{(secs % 3600) // 60}m"
        return f"{secs // 86400}d{(secs % 86400) // 3600}h"

    def matches(self, query: str) -> bool:
        """Case-insensitive match against name, project, status and path."""
        if not query:
            return True
        q = query.lower()
        return any(
            q in field.lower()
            for field in (self.name, self.project, self.status.value, self.path)
        )
