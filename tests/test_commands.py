"""Tests for CLI subcommands."""

from argparse import Namespace

import pytest

import claude_dashboard.commands as commands
from claude_dashboard.detector import DetectionError
from claude_dashboard.manager import ReadOnlySessionError
from claude_dashboard.models import Session, Status
from claude_dashboard.tmux import TmuxError


class _StubManager:
    def __init__(
        self,
        sessions=None,
        error: Exception | None = None,
        existing: tuple[str, ...] = (),
    ) -> None:
        self.sessions = sessions or []
        self.error = error
        self.existing = existing
        self.calls: list[tuple] = []

    def list_sessions(self) -> list[Session]:
        if self.error is not None:
            raise self.error
        return self.sessions

    def session_name(self, name: str) -> str:
        return name if name.startswith("cd-") else "cd-" + name

    def exists(self, name: str) -> bool:
        return self.session_name(name) in self.existing

    def create(self, name: str, path: str, claude_args: str) -> str:
        self.calls.append(("create", name, path, claude_args))
        if self.error is not None:
            raise self.error
        return self.session_name(name)

    def kill(self, name: str) -> None:
        self.calls.append(("kill", name))
        if self.error is not None:
            raise self.error

    def logs(self, name: str, lines: int) -> str:
        self.calls.append(("logs", name, lines))
        if self.error is not None:
            raise self.error
        return "pane output\n"

    def send(self, session: Session, text: str) -> None:
        self.calls.append(("send", session.name, text))
        if not session.managed:
            raise ReadOnlySessionError(f"{session.name} is read-only")


def _use(monkeypatch, manager: _StubManager) -> list[str]:
    monkeypatch.setattr(commands, "_manager", lambda: manager)
    attached: list[str] = []
    monkeypatch.setattr(commands, "_exec_attach", attached.append)
    return attached


def test_ls_empty(monkeypatch, capsys) -> None:
    _use(monkeypatch, _StubManager())
    commands.cmd_ls(Namespace())
    assert "No Claude sessions" in capsys.readouterr().out


def test_ls_rows(monkeypatch, capsys) -> None:
    _use(monkeypatch, _StubManager([
        Session(name="cd-api", project="api", status=Status.WAITING, path="/w/api"),
        Session(name="terminal/pts/3", status=Status.TERMINAL, managed=False),
    ]))
    commands.cmd_ls(Namespace())
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert "cd-api" in lines[0] and "◎ waiting" in lines[0] and "/w/api" in lines[0]
    assert lines[1].startswith("·")


def test_ls_detection_error_exits(monkeypatch, capsys) -> None:
    _use(monkeypatch, _StubManager(error=DetectionError("tmux unavailable")))
    with pytest.raises(SystemExit) as exc:
        commands.cmd_ls(Namespace())
    assert exc.value.code == 1
    assert "✗ tmux unavailable" in capsys.readouterr().err


def test_new_creates_and_attaches(monkeypatch, capsys, tmp_path) -> None:
    manager = _StubManager()
    attached = _use(monkeypatch, manager)
    commands.cmd_new(Namespace(name="api", path=str(tmp_path), args="--model opus"))
    assert manager.calls == [("create", "api", str(tmp_path), "--model opus")]
    assert attached == ["cd-api"]
    assert "✓ Session 'cd-api' created" in capsys.readouterr().out


def test_new_defaults_name_from_path(monkeypatch, tmp_path) -> None:
    manager = _StubManager()
    _use(monkeypatch, manager)
    monkeypatch.setattr(commands, "default_session_name", lambda path: "derived")
    commands.cmd_new(Namespace(name=None, path=str(tmp_path), args=None))
    assert manager.calls == [("create", "derived", str(tmp_path), "")]


def test_new_existing_session_attaches(monkeypatch, capsys, tmp_path) -> None:
    manager = _StubManager(
        error=TmuxError("duplicate session: cd-api"), existing=("cd-api",),
    )
    attached = _use(monkeypatch, manager)
    commands.cmd_new(Namespace(name="api", path=str(tmp_path), args=None))
    assert attached == ["cd-api"]
    assert "Attaching to existing session 'cd-api'" in capsys.readouterr().out


def test_kill(monkeypatch, capsys) -> None:
    manager = _StubManager()
    _use(monkeypatch, manager)
    commands.cmd_kill(Namespace(name="cd-api"))
    assert manager.calls == [("kill", "cd-api")]
    assert '✓ Killed "cd-api"' in capsys.readouterr().out


def test_kill_failure_exits(monkeypatch) -> None:
    _use(monkeypatch, _StubManager(error=TmuxError("can't find session")))
    with pytest.raises(SystemExit):
        commands.cmd_kill(Namespace(name="cd-api"))


def test_logs_prints_pane(monkeypatch, capsys) -> None:
    manager = _StubManager()
    _use(monkeypatch, manager)
    commands.cmd_logs(Namespace(name="cd-api", lines=50))
    assert manager.calls == [("logs", "cd-api", 50)]
    assert capsys.readouterr().out == "pane output\n"


def test_attach_execs(monkeypatch) -> None:
    attached = _use(monkeypatch, _StubManager())
    commands.cmd_attach(Namespace(name="cd-api"))
    assert attached == ["cd-api"]


def test_new_failure_without_session_exits(monkeypatch, capsys, tmp_path) -> None:
    manager = _StubManager(error=TmuxError("invalid session name 'cd-my.app'"))
    attached = _use(monkeypatch, manager)
    with pytest.raises(SystemExit) as exc:
        commands.cmd_new(Namespace(name="my.app", path=str(tmp_path), args=None))
    assert exc.value.code == 1
    assert attached == []
    assert "invalid session name" in capsys.readouterr().err


def test_new_from_dotted_directory(monkeypatch, tmp_path) -> None:
    project = tmp_path / "my.app"
    project.mkdir()
    manager = _StubManager()
    attached = _use(monkeypatch, manager)
    commands.cmd_new(Namespace(name=None, path=str(project), args=None))
    created_name = manager.calls[0][1]
    assert "." not in created_name
    assert created_name.endswith("my-app")
    assert attached == ["cd-" + created_name]


def test_send_to_managed_session(monkeypatch, capsys) -> None:
    manager = _StubManager([Session(name="cd-api")])
    _use(monkeypatch, manager)
    commands.cmd_send(Namespace(name="cd-api", text="/compact"))
    assert manager.calls == [("send", "cd-api", "/compact")]
    assert '✓ Sent to "cd-api"' in capsys.readouterr().out


def test_send_unknown_session_exits(monkeypatch, capsys) -> None:
    _use(monkeypatch, _StubManager([Session(name="cd-api")]))
    with pytest.raises(SystemExit):
        commands.cmd_send(Namespace(name="cd-web", text="hi"))
    assert "no session named cd-web" in capsys.readouterr().err


def test_send_to_terminal_session_is_refused(monkeypatch, capsys) -> None:
    _use(monkeypatch, _StubManager([
        Session(name="terminal/pts/3", status=Status.TERMINAL, managed=False),
    ]))
    with pytest.raises(SystemExit):
        commands.cmd_send(Namespace(name="terminal/pts/3", text="hi"))
    assert "read-only" in capsys.readouterr().err
