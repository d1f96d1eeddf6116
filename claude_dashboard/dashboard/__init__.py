"""Textual dashboard for Claude sessions."""

from __future__ import annotations

import argparse

from .app import DashboardApp


def cmd_dashboard(args: argparse.Namespace) -> None:
    DashboardApp().run()
