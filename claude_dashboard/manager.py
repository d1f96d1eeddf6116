"""Session operations used by the CLI and the dashboard."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from . import tmux
from .config import SESSION_NAME_UNSAFE_RE
from .detector import Detector
from .models import Session, Status
from .settings import Settings
from .tmux import TmuxError

logger = logging.getLogger(__name__)


class ReadOnlySessionError(TmuxError):
    """The session is a bare terminal process and cannot be managed."""


def default_session_name(path: str, home: str | None = None) -> str:
    """Name a session after its directory: ``~/work/api`` -> ``work-api``.

    Characters tmux session names may not carry (dots, spaces) become ``-``.
    """
    home = home if home is not None else str(Path.home())
    rel = path.rstrip("/")
    if home and (rel == home or rel.startswith(home.rstrip("/") + "/")):
        rel = rel[len(home):].lstrip("/")
    name = rel.strip("/").replace("/", "-") or os.path.basename(path.rstrip("/"))
    return SESSION_NAME_UNSAFE_RE.sub("-", name)


def filter_sessions(sessions: list[Session], query: str) -> list[Session]:
    if not query:
        return sessions
    return [s for s in sessions if s.matches(query)]


def find_by_name(sessions: list[Session], name: str) -> Session | None:
    for s in sessions:
        if s.name == name:
            return s
    return None


def _require_managed(session: Session) -> None:
    if not session.managed:
        raise ReadOnlySessionError(
            f"{session.name} is running outside tmux and is read-only"
        )


class SessionManager:
    def __init__(self, settings: Settings, detector: Detector | None = None) -> None:
        self.settings = settings
        self.detector = detector if detector is not None else Detector(settings)

    @property
    def _timeout(self) -> float:
        return self.settings.command_timeout

    def list_sessions(self) -> list[Session]:
        return self.detector.detect()

    refresh = list_sessions

    def session_name(self, name: str) -> str:
        prefix = self.settings.session_prefix
        return name if name.startswith(prefix) else prefix + name

    def exists(self, name: str) -> bool:
        return tmux.has_session(self.session_name(name), timeout=self._timeout)

    def create(self, name: str, project_dir: str = "", claude_args: str = "") -> str:
        """Start the target program in a new detached session; return its name."""
        session_name = self.session_name(name)
        command = self.settings.target_program
        if claude_args:
            command = f"{command} {claude_args}"
        start_dir = os.path.expanduser(project_dir or self.settings.default_dir or os.getcwd())
        tmux.new_session(session_name, start_dir, command, timeout=self._timeout)
        return session_name

    def kill(self, session: Session | str) -> None:
        if isinstance(session, Session):
            _require_managed(session)
            session = session.name
        tmux.kill_session(session, timeout=self._timeout)

    def kill_idle(self, sessions: list[Session]) -> list[str]:
        """Kill every managed idle session; return the names killed."""
        killed: list[str] = []
        for s in sessions:
            if not s.managed or s.status != Status.IDLE:
                continue
            try:
                tmux.kill_session(s.name, timeout=self._timeout)
            except TmuxError as exc:
                logger.warning("Could not kill %s: %s", s.name, exc)
                continue
            killed.append(s.name)
        return killed

    def logs(self, session: Session | str, lines: int = 0) -> str:
        """Recent pane output for a session."""
        if isinstance(session, Session):
            _require_managed(session)
            session = session.name
        if lines <= 0:
            lines = self.settings.log_history
        content = tmux.capture_pane(session, lines, timeout=self._timeout)
        if content is None:
            raise TmuxError(f"failed to capture pane of {session}")
        return content

    def send(self, session: Session | str, command: str) -> None:
        if isinstance(session, Session):
            _require_managed(session)
            session = session.name
        tmux.send_keys(session, command, timeout=self._timeout)

    def attach_argv(self, session: Session | str) -> list[str]:
        if isinstance(session, Session):
            _require_managed(session)
            session = session.name
        return tmux.attach_argv(session)
