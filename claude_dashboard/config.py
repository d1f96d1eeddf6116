"""Global configuration, constants, and compiled regexes."""

from __future__ import annotations

import os
import re
from pathlib import Path


DASHBOARD_HOME = Path(
    os.environ.get("CLAUDE_DASHBOARD_HOME") or "~/.claude-dashboard"
).expanduser()


def _ensure_writable_dir(path: Path, fallback: Path) -> Path:
    """Ensure directory exists, falling back when creation is denied."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


DASHBOARD_HOME = _ensure_writable_dir(DASHBOARD_HOME, Path("/tmp/claude-dashboard"))

USER_CONFIG_PATH = DASHBOARD_HOME / "config.toml"
LOG_FILE = DASHBOARD_HOME / "claude-dashboard.log"

# Program whose sessions are tracked, and the prefix of sessions we create.
TARGET_PROGRAM = "claude"
SESSION_PREFIX = "cd-"

# tmux accepts more, but these are the only names we create or target.
SESSION_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
SESSION_NAME_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")

# ps reports these for processes without a controlling terminal.
NO_TTY_VALUES: frozenset[str] = frozenset({"?", "??", "-", ""})

# lsof -Fn prefixes each name field with "n".
LSOF_NAME_MARKER = "n"
