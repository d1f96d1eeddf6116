"""Main dashboard App: session table, polling, key actions."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import subprocess
import time

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import DataTable, Input, Label, Static
from textual.widgets.data_table import CellDoesNotExist

from ..detector import DetectionError
from ..manager import SessionManager, filter_sessions
from ..models import Session, Status
from ..settings import SETTINGS, Settings
from ..tmux import TmuxError
from .css import APP_CSS
from .screens import (
    ConfirmKillIdleScreen,
    ConfirmKillScreen,
    HelpScreen,
    LogsScreen,
    NewSessionScreen,
)

logger = logging.getLogger(__name__)

COLUMNS: tuple[tuple[str, int | None], ...] = (
    ("#", 4),
    ("NAME", 24),
    ("PROJECT", 24),
    ("STATUS", 12),
    ("UPTIME", 8),
    ("CPU", 7),
    ("MEM", 7),
    ("PATH", None),
)
_PATH_WIDTH = 48

STATUS_COLORS: dict[Status, str] = {
    Status.ACTIVE: "#5fd75f",
    Status.IDLE: "#888888",
    Status.WAITING: "#ffd75f",
    Status.TERMINAL: "#5f87d7",
    Status.UNKNOWN: "#5a5a5a",
}


def truncate(s: str, maxlen: int) -> str:
    """Cut s to maxlen characters, ending in an ellipsis when room allows."""
    if maxlen <= 0 or len(s) <= maxlen:
        return s
    if maxlen <= 3:
        return s[:maxlen]
    return s[: maxlen - 1] + "…"


def truncate_path(path: str, maxlen: int) -> str:
    """Keep the tail of a path, which is the informative part."""
    if maxlen <= 0 or len(path) <= maxlen:
        return path
    if maxlen <= 3:
        return "…"
    return "…" + path[-(maxlen - 1):]


def session_key(s: Session) -> str:
    """Row key; terminal names can repeat when processes share a tty."""
    return s.name if s.managed else f"{s.name}#{s.pid}"


def status_text(status: Status) -> Text:
    return Text(status.label, style=STATUS_COLORS[status])


@dataclass
class PollResult:
    """Data gathered by the background poll worker."""
    sessions: list[Session] = field(default_factory=list)
    polled_at: float = 0.0
    error: str = ""


class DashboardApp(App):
    TITLE = "Claude Dashboard"
    DEFAULT_CSS = APP_CSS
    BINDINGS = [
        Binding("n", "new_session", "New"),
        Binding("K", "kill_session", "Kill"),
        Binding("ctrl+k", "kill_idle", "Kill idle", show=False),
        Binding("l", "logs", "Logs"),
        Binding("slash", "filter", "Filter", key_display="/"),
        Binding("escape", "clear_filter", "Clear filter", show=False),
        Binding("r", "refresh", "Refresh"),
        Binding("question_mark", "show_help", "?", key_display="?"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Settings = SETTINGS,
        manager: SessionManager | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.manager = manager or SessionManager(settings)
        self.sessions: list[Session] = []
        self.filter_query: str = ""
        self.last_polled_at: float = 0.0
        self.last_error: str = ""
        self._poll_in_flight: bool = False

    def compose(self) -> ComposeResult:
        yield Horizontal(
            Label("◆ Claude Dashboard", id="title-text"),
            Static("", id="title-clock"),
            id="title-bar",
        )
        yield Input(placeholder="filter…", id="filter-input", classes="hidden")
        yield DataTable(id="session-table", cursor_type="row", zebra_stripes=True)
        yield Static("", id="status-line")

    def on_mount(self) -> None:
        table = self.query_one("#session-table", DataTable)
        for title, width in COLUMNS:
            table.add_column(title, key=title, width=width)
        table.focus()
        self.poll_and_update()
        self.set_interval(self.settings.refresh_interval, self.poll_and_update)
        self.set_interval(1.0, self.update_clock)

    def update_clock(self) -> None:
        self.query_one("#title-clock", Static).update(
            f"  {time.strftime('%H:%M:%S')}"
        )

    # ── Polling ──────────────────────────────────────────────────────

    def poll_and_update(self) -> None:
        """Kick off background data gathering unless a tick is still running."""
        if self._poll_in_flight:
            return
        self._poll_in_flight = True
        self._poll_worker()

    @work(thread=True, exclusive=True, group="poll")
    def _poll_worker(self) -> None:
        """Gather sessions in a background thread (no UI access)."""
        try:
            sessions = self.manager.refresh()
        except DetectionError as exc:
            logger.warning("Refresh failed: %s", exc)
            result = PollResult(polled_at=time.time(), error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected refresh failure")
            result = PollResult(polled_at=time.time(), error=f"refresh failed: {exc}")
        else:
            result = PollResult(sessions=sessions, polled_at=time.time())
        self.call_from_thread(self._apply_poll_result, result)

    def _apply_poll_result(self, r: PollResult) -> None:
        """Apply gathered data to the UI (runs on the main thread)."""
        self._poll_in_flight = False
        self.last_polled_at = r.polled_at
        self.last_error = r.error
        if not r.error:
            # A failed tick keeps showing the previous sessions.
            self.sessions = r.sessions
        self._render_table()
        self._render_status_line()

    def visible_sessions(self) -> list[Session]:
        return filter_sessions(self.sessions, self.filter_query)

    def _render_table(self) -> None:
        table = self.query_one("#session-table", DataTable)
        selected = self._get_selected_row_key()
        table.clear()
        now = time.time()
        visible = self.visible_sessions()
        for i, s in enumerate(visible, start=1):
            name = truncate(s.name, 24)
            table.add_row(
                str(i),
                name if s.managed else Text(name, style="italic"),
                truncate(s.project, 24),
                status_text(s.status),
                s.uptime(now),
                f"{s.cpu_percent:.1f}%",
                f"{s.mem_percent:.1f}%",
                truncate_path(s.path, _PATH_WIDTH),
                key=session_key(s),
            )
        names = [session_key(s) for s in visible]
        if selected in names:
            table.move_cursor(row=names.index(selected))

    def _render_status_line(self) -> None:
        line = self.query_one("#status-line", Static)
        if self.last_error:
            line.set_class(True, "error")
            line.update(f"✗ {self.last_error}")
            return
        line.set_class(False, "error")
        visible = len(self.visible_sessions())
        parts = [f"{visible} session(s)"]
        if self.filter_query:
            parts.append(f"filter: {self.filter_query}")
        waiting = sum(1 for s in self.sessions if s.status == Status.WAITING)
        if waiting:
            parts.append(f"{waiting} waiting")
        line.update(" • ".join(parts))

    # ── Selection ────────────────────────────────────────────────────

    def _get_selected_row_key(self) -> str | None:
        table = self.query_one("#session-table", DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except (CellDoesNotExist, KeyError, IndexError):
            return None
        return row_key.value

    def _get_selected_session(self) -> Session | None:
        key = self._get_selected_row_key()
        if key is None:
            return None
        for s in self.sessions:
            if session_key(s) == key:
                return s
        return None

    def _get_selected_managed(self) -> Session | None:
        s = self._get_selected_session()
        if s is None:
            return None
        if not s.managed:
            self.notify(f"{s.name} runs outside tmux (read-only)", severity="warning")
            return None
        return s

    # ── Actions ──────────────────────────────────────────────────────

    def action_refresh(self) -> None:
        self.poll_and_update()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        self.action_attach()

    def action_attach(self) -> None:
        s = self._get_selected_managed()
        if s is None:
            return
        argv = self.manager.attach_argv(s)
        with self.suspend():
            subprocess.run(argv)
        self.poll_and_update()

    def action_new_session(self) -> None:
        self.push_screen(NewSessionScreen(self.settings.default_dir))

    def action_kill_session(self) -> None:
        s = self._get_selected_managed()
        if s is not None:
            self.push_screen(ConfirmKillScreen(s))

    def action_kill_idle(self) -> None:
        idle = [s for s in self.sessions if s.managed and s.status == Status.IDLE]
        if not idle:
            self.notify("No idle sessions")
            return
        self.push_screen(ConfirmKillIdleScreen(idle))

    def action_logs(self) -> None:
        s = self._get_selected_managed()
        if s is None:
            return
        try:
            content = self.manager.logs(s)
        except TmuxError as exc:
            self.notify(str(exc), severity="error")
            return
        self.push_screen(LogsScreen(s.name, content))

    def action_filter(self) -> None:
        box = self.query_one("#filter-input", Input)
        box.remove_class("hidden")
        box.focus()

    def action_clear_filter(self) -> None:
        box = self.query_one("#filter-input", Input)
        box.value = ""
        box.add_class("hidden")
        self.set_filter("")
        self.query_one("#session-table", DataTable).focus()

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter-input":
            self.set_filter(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "filter-input":
            self.query_one("#session-table", DataTable).focus()

    def set_filter(self, query: str) -> None:
        self.filter_query = query.strip()
        self._render_table()
        self._render_status_line()

    # ── Mutations (called from screens) ──────────────────────────────

    def do_create_session(self, name: str, directory: str) -> None:
        try:
            session_name = self.manager.create(name, directory)
        except TmuxError as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Created {session_name}")
        self.poll_and_update()

    def do_kill_session(self, session: Session) -> None:
        try:
            self.manager.kill(session)
        except TmuxError as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Killed {session.name}")
        self.poll_and_update()

    def do_kill_idle(self, sessions: list[Session]) -> None:
        killed = self.manager.kill_idle(sessions)
        self.notify(f"Killed {len(killed)} idle session(s)")
        self.poll_and_update()
