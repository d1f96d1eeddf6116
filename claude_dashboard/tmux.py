"""Tmux session listing, pane inspection, and session mutation."""

from __future__ import annotations

import logging
import os
import subprocess

from .config import SESSION_NAME_RE
from .models import ChildIndex, RawTmuxSession
from .process import has_descendant_matching

logger = logging.getLogger(__name__)

SESSION_FORMAT = (
    "#{session_name}|#{session_created}|#{session_attached}|"
    "#{session_windows}|#{session_activity}|#{session_path}"
)
_SESSION_FIELDS = 6

_DEFAULT_TIMEOUT: float = 5


class TmuxError(Exception):
    """A tmux mutation could not be performed."""


def _run_tmux(
    command: list[str], timeout: float = _DEFAULT_TIMEOUT,
) -> subprocess.CompletedProcess[str] | None:
    """Run a tmux command and return the completed process or None on hard failure."""
    try:
        return subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
        logger.debug("%s failed: %s", " ".join(command[:2]), exc)
        return None


def validate_session_name(name: str) -> None:
    if not SESSION_NAME_RE.match(name):
        raise TmuxError(
            f"invalid session name {name!r}: only letters, digits, "
            "underscore and hyphen are allowed"
        )


def _parse_epoch(raw: str) -> float:
    try:
        return float(int(raw.strip()))
    except ValueError:
        return 0.0


def _parse_int(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def parse_sessions(output: str) -> list[RawTmuxSession]:
    """Parse ``list-sessions -F SESSION_FORMAT`` output.

    Lines with fewer than six fields are dropped; bad numbers become zero.
    """
    sessions: list[RawTmuxSession] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = line.split("|")
        if len(parts) < _SESSION_FIELDS:
            continue
        sessions.append(RawTmuxSession(
            name=parts[0],
            created=_parse_epoch(parts[1]),
            attached=parts[2] == "1",
            windows=_parse_int(parts[3]),
            activity=_parse_epoch(parts[4]),
            # A '|' inside the path would otherwise be cut off.
            path="|".join(parts[5:]),
        ))
    return sessions


def list_sessions(timeout: float = _DEFAULT_TIMEOUT) -> list[RawTmuxSession] | None:
    """List all tmux sessions.

    Returns None when there is no usable tmux (not installed, no server
    running, timed out). An empty list means a server with no sessions.
    """
    r = _run_tmux(["tmux", "list-sessions", "-F", SESSION_FORMAT], timeout=timeout)
    if r is None:
        return None
    if r.returncode != 0:
        logger.debug("tmux list-sessions unavailable: %s", r.stderr.strip())
        return None
    return parse_sessions(r.stdout)


def list_pane_commands(name: str, timeout: float = _DEFAULT_TIMEOUT) -> list[str]:
    """Return ``pane_current_command`` for every pane in a session."""
    r = _run_tmux(
        ["tmux", "list-panes", "-t", name, "-F", "#{pane_current_command}"],
        timeout=timeout,
    )
    if r is None or r.returncode != 0:
        return []
    return [line.strip() for line in r.stdout.splitlines() if line.strip()]


def session_pid(name: str, timeout: float = _DEFAULT_TIMEOUT) -> str:
    """Return the pid of the first pane's process, or empty string."""
    r = _run_tmux(
        ["tmux", "list-panes", "-t", name, "-F", "#{pane_pid}"],
        timeout=timeout,
    )
    if r is None or r.returncode != 0:
        return ""
    lines = r.stdout.strip().splitlines()
    if not lines:
        return ""
    pid = lines[0].strip()
    return pid if pid.isdigit() else ""


def capture_pane(
    name: str, history: int = 0, timeout: float = _DEFAULT_TIMEOUT,
) -> str | None:
    """Capture pane text, including ``history`` lines of scrollback.

    None means the capture failed, as opposed to an empty pane.
    """
    command = ["tmux", "capture-pane", "-t", name, "-p"]
    if history > 0:
        command += ["-S", f"-{history}"]
    r = _run_tmux(command, timeout=timeout)
    if r is None or r.returncode != 0:
        return None
    return r.stdout


def has_target_process(
    name: str,
    index: ChildIndex,
    signature: str,
    pane_pid: str | None = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> bool:
    """Check whether a session runs the target program anywhere in its panes.

    The pane's foreground command is checked first; when that is a shell,
    the pane process tree from the current snapshot is searched. Pass
    pane_pid when the caller already resolved it.
    """
    needle = signature.lower()
    for command in list_pane_commands(name, timeout=timeout):
        if needle in command.lower():
            return True
    pid = pane_pid if pane_pid is not None else session_pid(name, timeout=timeout)
    if not pid:
        return False
    return has_descendant_matching(pid, index, signature)


def has_session(name: str, timeout: float = _DEFAULT_TIMEOUT) -> bool:
    """True if a session with exactly this name exists."""
    if not SESSION_NAME_RE.match(name):
        return False
    r = _run_tmux(["tmux", "has-session", "-t", f"={name}"], timeout=timeout)
    return r is not None and r.returncode == 0


def new_session(
    name: str,
    start_dir: str = "",
    command: str = "",
    timeout: float = _DEFAULT_TIMEOUT,
) -> None:
    validate_session_name(name)
    args = ["tmux", "new-session", "-d", "-s", name]
    if start_dir:
        args += ["-c", start_dir]
    if command:
        args.append(command)
    _check(_run_tmux(args, timeout=timeout), f"create session {name}")
    logger.info("Created tmux session %s in %s", name, start_dir or ".")


def kill_session(name: str, timeout: float = _DEFAULT_TIMEOUT) -> None:
    validate_session_name(name)
    _check(
        _run_tmux(["tmux", "kill-session", "-t", name], timeout=timeout),
        f"kill session {name}",
    )
    logger.info("Killed tmux session %s", name)


def send_keys(name: str, keys: str, timeout: float = _DEFAULT_TIMEOUT) -> None:
    validate_session_name(name)
    _check(
        _run_tmux(["tmux", "send-keys", "-t", name, keys, "Enter"], timeout=timeout),
        f"send keys to {name}",
    )


def attach_argv(name: str) -> list[str]:
    """Command that attaches the current terminal to a session."""
    if os.environ.get("TMUX"):
        return ["tmux", "switch-client", "-t", name]
    return ["tmux", "attach-session", "-t", name]


def _check(r: subprocess.CompletedProcess[str] | None, action: str) -> None:
    if r is None:
        raise TmuxError(f"failed to {action}: tmux not available")
    if r.returncode != 0:
        detail = r.stderr.strip() or f"exit status {r.returncode}"
        raise TmuxError(f"failed to {action}: {detail}")
