"""Working-directory lookup for arbitrary pids, cached with a short TTL."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
import subprocess
import threading
import time

from .config import LSOF_NAME_MARKER

logger = logging.getLogger(__name__)


def _run_lsof(pid: str, timeout: float = 5) -> str | None:
    try:
        r = subprocess.run(
            ["lsof", "-a", "-p", pid, "-d", "cwd", "-Fn"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
        logger.debug("lsof for pid %s failed: %s", pid, exc)
        return None
    if r.returncode != 0:
        return None
    return r.stdout


def parse_lsof_cwd(output: str) -> str:
    """Extract the path from ``lsof -Fn`` output (the ``n/...`` line)."""
    for line in output.splitlines():
        if line.startswith(LSOF_NAME_MARKER + "/"):
            return line[len(LSOF_NAME_MARKER):]
    return ""


def resolve_cwd(pid: str, timeout: float = 5) -> str:
    """Best-effort working directory of pid; empty string if unknown."""
    if not pid:
        return ""
    output = _run_lsof(pid, timeout=timeout)
    if output is None:
        return ""
    return parse_lsof_cwd(output)


@dataclass
class _Entry:
    path: str
    expires_at: float


class CwdCache:
    """Per-pid working-directory cache.

    Entries live for ``ttl`` seconds. The entry map is guarded by a lock so
    the poll worker and other threads can share one instance; the resolver
    runs outside the lock, so two racing misses may both resolve.
    """

    def __init__(
        self,
        ttl: float = 10.0,
        resolver: Callable[[str], str] = resolve_cwd,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._resolver = resolver
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, pid: str) -> str:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(pid)
            if entry is not None and now < entry.expires_at:
                return entry.path

        path = self._resolver(pid)

        with self._lock:
            self._entries[pid] = _Entry(path=path, expires_at=self._clock() + self.ttl)
        return path

    def prune(self, live_pids: set[str]) -> None:
        """Drop entries for pids that are no longer running."""
        with self._lock:
            for pid in list(self._entries):
                if pid not in live_pids:
                    del self._entries[pid]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
