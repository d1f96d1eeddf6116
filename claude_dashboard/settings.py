"""Typed settings loaded from TOML config with env-var overrides."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from .config import SESSION_PREFIX, TARGET_PROGRAM, USER_CONFIG_PATH

logger = logging.getLogger(__name__)


def _load_default_toml() -> dict:
    """Load the built-in default_config.toml shipped with the package."""
    ref = resources.files("claude_dashboard").joinpath("default_config.toml")
    return tomllib.loads(ref.read_text(encoding="utf-8"))


def _load_user_toml(path: Path) -> dict:
    """Load user config if it exists, otherwise empty dict."""
    if not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (override wins)."""
    merged = dict(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


@dataclass
class Settings:
    refresh_interval: float = 2.0
    session_prefix: str = SESSION_PREFIX
    default_dir: str = ""
    log_history: int = 1000
    target_program: str = TARGET_PROGRAM
    active_window: float = 2.0
    status_lines: int = 20
    cwd_cache_ttl: float = 10.0
    command_timeout: float = 5.0


def load_settings(user_config: Path = USER_CONFIG_PATH) -> Settings:
    """Load settings: defaults ← user TOML ← env vars."""
    raw = _deep_merge(_load_default_toml(), _load_user_toml(user_config))

    dash = raw.get("dashboard", {})
    sess = raw.get("sessions", {})
    det = raw.get("detection", {})

    refresh = float(os.environ.get(
        "CLAUDE_DASHBOARD_REFRESH", dash.get("refresh_interval", 2.0),
    ))
    prefix = os.environ.get(
        "CLAUDE_DASHBOARD_PREFIX", sess.get("prefix", SESSION_PREFIX),
    )
    default_dir = os.environ.get(
        "CLAUDE_DASHBOARD_DEFAULT_DIR", dash.get("default_dir", ""),
    )

    log_history = int(dash.get("log_history", 1000))
    if log_history <= 0:
        log_history = 1000

    return Settings(
        refresh_interval=max(0.1, refresh),
        session_prefix=prefix or SESSION_PREFIX,
        default_dir=os.path.expanduser(default_dir) if default_dir else "",
        log_history=log_history,
        target_program=str(sess.get("target_program", TARGET_PROGRAM)),
        active_window=float(det.get("active_window", 2.0)),
        status_lines=int(det.get("status_lines", 20)),
        cwd_cache_ttl=float(det.get("cwd_cache_ttl", 10.0)),
        command_timeout=float(det.get("command_timeout", 5.0)),
    )


# Loaded once on import.
SETTINGS = load_settings()
