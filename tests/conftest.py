"""Pytest global setup for isolated dashboard state.

This keeps tests from reading the user's config or writing the live log.
"""

from __future__ import annotations

import atexit
import os
from pathlib import Path
import shutil
import tempfile

import pytest


_TEST_ROOT = Path(tempfile.mkdtemp(prefix="claude-dashboard-pytest-"))

# Force imported modules to use isolated paths.
os.environ["CLAUDE_DASHBOARD_HOME"] = str(_TEST_ROOT)
for _var in (
    "CLAUDE_DASHBOARD_REFRESH",
    "CLAUDE_DASHBOARD_PREFIX",
    "CLAUDE_DASHBOARD_DEFAULT_DIR",
):
    os.environ.pop(_var, None)


@atexit.register
def _cleanup_test_state() -> None:
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture
def settings():
    from claude_dashboard.settings import Settings

    return Settings()
