"""Shared test helpers."""

from __future__ import annotations

import subprocess
from typing import Any


def completed(
    stdout: str = "", returncode: int = 0, stderr: str = "",
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr,
    )


def capture_tmux(
    monkeypatch: Any,
    responses: dict[str, subprocess.CompletedProcess[str] | None],
) -> list[list[str]]:
    """Patch tmux._run_tmux; answer by subcommand and record every call."""
    calls: list[list[str]] = []

    def _fake(command: list[str], timeout: float = 5):
        calls.append(command)
        return responses.get(command[1], completed())

    monkeypatch.setattr("claude_dashboard.tmux._run_tmux", _fake)
    return calls


def capture_notify(app: Any, monkeypatch: Any) -> list[str]:
    """Patch app.notify and return collected messages."""
    notices: list[str] = []
    monkeypatch.setattr(
        app, "notify", lambda msg, **kwargs: notices.append(msg),
    )
    return notices
