"""Claude session discovery across tmux and bare terminals."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
import logging
import time

from . import process, tmux
from .cwd import CwdCache, resolve_cwd
from .models import (
    ChildIndex,
    ProcessSnapshot,
    RawTmuxSession,
    Session,
    Status,
)
from .settings import Settings
from .state import detect_status

logger = logging.getLogger(__name__)


class DetectionError(Exception):
    """Neither tmux nor the process table could be read."""


def _last_component(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return ""
    return stripped.rsplit("/", 1)[-1]


def project_label(name: str, path: str, prefix: str) -> str:
    """Derive a display project from a session name or its directory."""
    if prefix and name.startswith(prefix):
        return name[len(prefix):]
    return _last_component(path) or name


class Detector:
    """Builds the unified session list for one poll tick.

    The only state kept between calls is the working-directory cache.
    """

    def __init__(
        self,
        settings: Settings,
        cwd_cache: CwdCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        if cwd_cache is None:
            cwd_cache = CwdCache(
                ttl=settings.cwd_cache_ttl,
                resolver=partial(resolve_cwd, timeout=settings.command_timeout),
            )
        self.cwd_cache = cwd_cache
        self._clock = clock

    @property
    def _timeout(self) -> float:
        return self.settings.command_timeout

    def detect(self) -> list[Session]:
        """Run one full discovery pass.

        Raises DetectionError only when tmux is unavailable and the terminal
        process listing failed too; otherwise returns the best partial result.
        """
        snapshot = process.capture_snapshot(timeout=self._timeout)
        index = process.build_child_index(snapshot)

        raw_sessions = tmux.list_sessions(timeout=self._timeout)
        managed: list[Session] = []
        if raw_sessions is not None:
            now = self._clock()
            for raw in raw_sessions:
                is_candidate, pane_pid = self._match_candidate(raw, index)
                if not is_candidate:
                    continue
                managed.append(
                    self._managed_session(raw, snapshot, index, now, pane_pid)
                )

        managed_pids = {s.pid for s in managed if s.pid}
        terminal = self.detect_terminal_sessions(managed_pids, snapshot, index)
        if terminal is None:
            if raw_sessions is None:
                raise DetectionError("tmux unavailable and process listing failed")
            terminal = []

        if snapshot:
            self.cwd_cache.prune(set(snapshot))
        return managed + terminal

    def _match_candidate(
        self, raw: RawTmuxSession, index: ChildIndex,
    ) -> tuple[bool, str | None]:
        """Name prefix, then name keyword, then the pane process tree.

        Returns whether the session is a candidate and, when the process
        tree had to be searched, the pane pid resolved along the way.
        """
        target = self.settings.target_program
        if raw.name.startswith(self.settings.session_prefix):
            return True, None
        if target.lower() in raw.name.lower():
            return True, None
        pid = tmux.session_pid(raw.name, timeout=self._timeout)
        found = tmux.has_target_process(
            raw.name, index, target, pane_pid=pid, timeout=self._timeout,
        )
        return found, pid

    def _managed_session(
        self,
        raw: RawTmuxSession,
        snapshot: ProcessSnapshot,
        index: ChildIndex,
        now: float,
        pane_pid: str | None = None,
    ) -> Session:
        status = detect_status(
            raw.activity,
            partial(
                tmux.capture_pane,
                raw.name,
                self.settings.status_lines,
                timeout=self._timeout,
            ),
            now=now,
            active_window=self.settings.active_window,
            max_lines=self.settings.status_lines,
        )
        pid = pane_pid
        if pid is None:
            pid = tmux.session_pid(raw.name, timeout=self._timeout)
        usage = process.aggregate_usage(pid, snapshot, index)
        return Session(
            name=raw.name,
            project=project_label(raw.name, raw.path, self.settings.session_prefix),
            status=status,
            started_at=raw.created,
            last_activity_at=raw.activity,
            attached=raw.attached,
            pid=pid,
            cpu_percent=usage.cpu_percent,
            mem_percent=usage.mem_percent,
            path=raw.path,
            managed=True,
        )

    def detect_terminal_sessions(
        self,
        exclude_pids: set[str],
        snapshot: ProcessSnapshot | None = None,
        index: ChildIndex | None = None,
    ) -> list[Session] | None:
        """Find target-program processes running outside tmux.

        Pids in exclude_pids already belong to tmux sessions and are skipped
        here, so the merged result needs no second dedup pass. Returns None
        if the process listing failed.
        """
        procs = process.list_terminal_processes(timeout=self._timeout)
        if procs is None:
            return None
        snapshot = snapshot or {}
        index = index if index is not None else process.build_child_index(snapshot)

        sessions: list[Session] = []
        for proc in procs:
            if process.executable_name(proc.command_line) != self.settings.target_program:
                continue
            if proc.pid in exclude_pids:
                continue
            if not process.has_terminal(proc.tty):
                continue
            path = self.cwd_cache.get(proc.pid)
            usage = process.aggregate_usage(proc.pid, snapshot, index)
            sessions.append(Session(
                name=f"terminal/{proc.tty}",
                project=_last_component(path),
                status=Status.TERMINAL,
                pid=proc.pid,
                cpu_percent=usage.cpu_percent,
                mem_percent=usage.mem_percent,
                path=path,
                managed=False,
            ))
        return sessions
