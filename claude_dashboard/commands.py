"""CLI subcommands: ls, new, attach, kill, logs, send."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from .detector import DetectionError
from .manager import SessionManager, default_session_name, find_by_name
from .settings import SETTINGS
from .tmux import TmuxError, attach_argv

logger = logging.getLogger(__name__)


def _manager() -> SessionManager:
    return SessionManager(SETTINGS)


def _fail(message: str) -> None:
    print(f"✗ {message}", file=sys.stderr)
    sys.exit(1)


def _exec_attach(name: str) -> None:
    argv = attach_argv(name)
    try:
        os.execvp(argv[0], argv)
    except OSError as exc:
        _fail(f"could not attach to {name}: {exc}")


def cmd_ls(args: argparse.Namespace) -> None:
    try:
        sessions = _manager().list_sessions()
    except DetectionError as exc:
        _fail(str(exc))
        return
    if not sessions:
        print("No Claude sessions. Start one with: claude-dashboard new")
        return
    for s in sessions:
        mark = " " if s.managed else "·"
        print(
            f"{mark} {s.name:24s} {s.project:20s} {s.status_label:11s} "
            f"{s.uptime():>6s}  CPU:{s.cpu_percent:5.1f}%  "
            f"MEM:{s.mem_percent:4.1f}%  {s.path}"
        )


def cmd_new(args: argparse.Namespace) -> None:
    path = os.path.abspath(os.path.expanduser(args.path or SETTINGS.default_dir or os.getcwd()))
    name = args.name or default_session_name(path)
    manager = _manager()
    try:
        session_name = manager.create(name, path, args.args or "")
    except TmuxError as exc:
        session_name = manager.session_name(name)
        if not manager.exists(session_name):
            _fail(str(exc))
            return
        logger.info("create %s failed, session exists: %s", session_name, exc)
        print(f"Attaching to existing session '{session_name}'...")
    else:
        print(f"✓ Session '{session_name}' created in {path}")
    _exec_attach(session_name)


def cmd_attach(args: argparse.Namespace) -> None:
    _exec_attach(args.name)


def cmd_kill(args: argparse.Namespace) -> None:
    try:
        _manager().kill(args.name)
    except TmuxError as exc:
        _fail(str(exc))
        return
    print(f'✓ Killed "{args.name}"')


def cmd_logs(args: argparse.Namespace) -> None:
    try:
        content = _manager().logs(args.name, args.lines)
    except TmuxError as exc:
        _fail(str(exc))
        return
    sys.stdout.write(content)


def cmd_send(args: argparse.Namespace) -> None:
    manager = _manager()
    try:
        session = find_by_name(manager.list_sessions(), args.name)
    except DetectionError as exc:
        _fail(str(exc))
        return
    if session is None:
        _fail(f"no session named {args.name}")
        return
    try:
        manager.send(session, args.text)
    except TmuxError as exc:
        _fail(str(exc))
        return
    print(f'✓ Sent to "{session.name}"')
