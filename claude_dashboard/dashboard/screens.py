"""Modal screens: new session, confirm kill, logs, help."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, RichLog

from ..config import SESSION_NAME_RE
from ..models import Session
from .css import CONFIRM_KILL_CSS, HELP_CSS, LOGS_CSS, NEW_SESSION_CSS

if TYPE_CHECKING:
    from .app import DashboardApp


class _DashboardScreenMixin:
    """Mixin providing typed access to the DashboardApp instance."""

    @property
    def dash(self) -> DashboardApp:
        return self.app  # type: ignore[return-value, attr-defined]


# ── New session ───────────────────────────────────────────────────────

def validate_new_session(name: str, directory: str) -> str:
    """Return an error message for the form, or empty string when valid."""
    if not name:
        return "Name is required"
    if not SESSION_NAME_RE.match(name):
        return "Name may only contain letters, digits, '_' and '-'"
    if directory and not os.path.isdir(os.path.expanduser(directory)):
        return f"Directory not found: {directory}"
    return ""


class NewSessionScreen(_DashboardScreenMixin, ModalScreen):
    CSS = NEW_SESSION_CSS
    BINDINGS = [Binding("escape", "dismiss", "Cancel", show=False)]

    def __init__(self, default_dir: str = "") -> None:
        super().__init__()
        self.default_dir = default_dir or os.getcwd()

    def compose(self) -> ComposeResult:
        with Vertical(id="new-session-dialog"):
            yield Label("Session name")
            yield Input(placeholder="my-project", id="new-session-name")
            yield Label("Directory")
            yield Input(value=self.default_dir, id="new-session-dir")
            yield Label("", id="new-session-error")
            with Horizontal(id="new-session-buttons"):
                yield Button("Create", variant="primary", id="create-btn")
                yield Button("Cancel", variant="default", id="cancel-btn")

    def on_mount(self) -> None:
        self.query_one("#new-session-name", Input).focus()

    def _submit(self) -> None:
        name = self.query_one("#new-session-name", Input).value.strip()
        directory = self.query_one("#new-session-dir", Input).value.strip()
        error = validate_new_session(name, directory)
        if error:
            self.query_one("#new-session-error", Label).update(error)
            return
        self.dismiss()
        self.dash.do_create_session(name, directory)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "create-btn":
            self._submit()
        else:
            self.dismiss()


# ── Kill confirmation ─────────────────────────────────────────────────

class ConfirmKillScreen(_DashboardScreenMixin, ModalScreen):
    CSS = CONFIRM_KILL_CSS
    BINDINGS = [
        Binding("escape", "dismiss", "Cancel", show=False),
        Binding("y", "confirm", "Yes", show=False),
        Binding("n", "dismiss", "No", show=False),
    ]

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-kill-dialog"):
            yield Label(f"Kill session [bold]{self.session.name}[/bold]?")
            with Horizontal(id="confirm-kill-buttons"):
                yield Button("Yes, kill", variant="error", id="yes-btn")
                yield Button("No", variant="default", id="no-btn")

    def on_mount(self) -> None:
        self.query_one("#yes-btn", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "yes-btn":
            self.dash.do_kill_session(self.session)
        self.dismiss()
        event.stop()

    def action_confirm(self) -> None:
        self.dash.do_kill_session(self.session)
        self.dismiss()


class ConfirmKillIdleScreen(_DashboardScreenMixin, ModalScreen):
    CSS = CONFIRM_KILL_CSS
    BINDINGS = [
        Binding("escape", "dismiss", "Cancel", show=False),
        Binding("y", "confirm", "Yes", show=False),
        Binding("n", "dismiss", "No", show=False),
    ]

    def __init__(self, sessions: list[Session]) -> None:
        super().__init__()
        self.sessions = sessions

    def compose(self) -> ComposeResult:
        names = ", ".join(s.name for s in self.sessions)
        with Vertical(id="confirm-kill-dialog"):
            yield Label(f"Kill {len(self.sessions)} idle session(s)?")
            yield Label(Text(names, style="dim"))
            with Horizontal(id="confirm-kill-buttons"):
                yield Button("Yes, kill", variant="error", id="yes-btn")
                yield Button("No", variant="default", id="no-btn")

    def on_mount(self) -> None:
        self.query_one("#yes-btn", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "yes-btn":
            self.dash.do_kill_idle(self.sessions)
        self.dismiss()
        event.stop()

    def action_confirm(self) -> None:
        self.dash.do_kill_idle(self.sessions)
        self.dismiss()


# ── Logs ──────────────────────────────────────────────────────────────

class LogsScreen(ModalScreen):
    CSS = LOGS_CSS
    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=False),
        Binding("q", "dismiss", "Close", show=False),
    ]

    def __init__(self, session_name: str, content: str) -> None:
        super().__init__()
        self.session_name = session_name
        self.content = content

    def compose(self) -> ComposeResult:
        with Vertical(id="logs-dialog"):
            yield Label(f"Logs: {self.session_name}", id="logs-title")
            yield RichLog(id="logs-body", wrap=False, markup=False, auto_scroll=True)

    def on_mount(self) -> None:
        log = self.query_one("#logs-body", RichLog)
        log.write(Text.from_ansi(self.content.rstrip("\n")))
        log.focus()


# ── Help ──────────────────────────────────────────────────────────────

_HELP_BINDINGS: list[tuple[str, str]] = [
    ("Enter", "Attach to session"),
    ("n", "New session"),
    ("K", "Kill session"),
    ("Ctrl+k", "Kill all idle sessions"),
    ("l", "View logs"),
    ("/", "Filter"),
    ("r", "Refresh"),
    ("?", "This help"),
    ("q", "Quit"),
]


class HelpScreen(ModalScreen):
    CSS = HELP_CSS
    BINDINGS = [Binding("escape", "dismiss", "Close", show=False)]

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            yield Label("Claude Dashboard: keybindings", classes="help-title")
            for key, desc in _HELP_BINDINGS:
                with Horizontal(classes="help-row"):
                    yield Label(key, classes="help-key")
                    yield Label(desc, classes="help-desc")
            yield Label(
                "Terminal sessions (⊘) are read-only • Esc closes",
                classes="help-footer",
            )
