"""CLI entry point: argument parsing and dispatch."""

import argparse

from . import __version__
from .commands import cmd_attach, cmd_kill, cmd_logs, cmd_ls, cmd_new, cmd_send
from .dashboard import cmd_dashboard
from .log import configure_logging


def main():
    parser = argparse.ArgumentParser(
        prog="claude-dashboard",
        description="Monitor and manage Claude Code sessions in tmux and terminals",
    )
    parser.add_argument(
        "--version", action="version", version=f"claude-dashboard {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug-level logging",
    )
    sub = parser.add_subparsers(dest="cmd")

    p_ls = sub.add_parser("ls", help="List Claude sessions")
    p_ls.set_defaults(func=cmd_ls)

    p_new = sub.add_parser("new", help="Create a session and attach to it")
    p_new.add_argument("name", nargs="?", help="Session name (defaults to the path)")
    p_new.add_argument("--path", help="Working directory (default: current dir)")
    p_new.add_argument("--args", help='Arguments for claude, e.g. "--model opus"')
    p_new.set_defaults(func=cmd_new)

    p_attach = sub.add_parser("attach", help="Attach to a session")
    p_attach.add_argument("name", help="Session name")
    p_attach.set_defaults(func=cmd_attach)

    p_kill = sub.add_parser("kill", help="Kill a tmux session")
    p_kill.add_argument("name", help="Session name")
    p_kill.set_defaults(func=cmd_kill)

    p_logs = sub.add_parser("logs", help="Print recent pane output")
    p_logs.add_argument("name", help="Session name")
    p_logs.add_argument("-n", "--lines", type=int, default=0, help="History lines")
    p_logs.set_defaults(func=cmd_logs)

    p_send = sub.add_parser("send", help="Type a line into a session and press Enter")
    p_send.add_argument("name", help="Session name")
    p_send.add_argument("text", help="Text to send")
    p_send.set_defaults(func=cmd_send)

    p_dash = sub.add_parser("dashboard", aliases=["d"], help="Live dashboard")
    p_dash.set_defaults(func=cmd_dashboard)

    args = parser.parse_args()
    configure_logging(args.verbose)
    if hasattr(args, "func"):
        args.func(args)
    else:
        cmd_dashboard(args)
