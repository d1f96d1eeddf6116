"""Tests for session operations."""

import pytest

import claude_dashboard.tmux as tmux
from claude_dashboard.manager import (
    ReadOnlySessionError,
    SessionManager,
    default_session_name,
    filter_sessions,
    find_by_name,
)
from claude_dashboard.models import Session, Status
from claude_dashboard.tmux import TmuxError

from helpers import capture_tmux, completed


class _FakeDetector:
    def __init__(self, sessions: list[Session]) -> None:
        self.sessions = sessions
        self.calls = 0

    def detect(self) -> list[Session]:
        self.calls += 1
        return self.sessions


def _terminal(name: str = "terminal/pts/1") -> Session:
    return Session(name=name, status=Status.TERMINAL, pid="500", managed=False)


def _manager(settings, sessions=None) -> SessionManager:
    return SessionManager(settings, detector=_FakeDetector(sessions or []))


def test_default_session_name_relative_to_home():
    assert default_session_name("/home/me/work/api", home="/home/me") == "work-api"
    assert default_session_name("/home/me/api/", home="/home/me") == "api"


def test_default_session_name_outside_home():
    assert default_session_name("/srv/app", home="/home/me") == "srv-app"


def test_default_session_name_home_itself_uses_basename():
    assert default_session_name("/home/me", home="/home/me") == "me"


def test_default_session_name_sibling_of_home_is_not_stripped():
    assert default_session_name("/home/meg/x", home="/home/me") == "home-meg-x"


def test_filter_and_find():
    a = Session(name="cd-api", project="api", status=Status.IDLE)
    b = Session(name="cd-web", project="web", status=Status.WAITING)
    assert filter_sessions([a, b], "") == [a, b]
    assert filter_sessions([a, b], "WAIT") == [b]
    assert find_by_name([a, b], "cd-web") is b
    assert find_by_name([a, b], "nope") is None


def test_list_sessions_delegates_to_detector(settings):
    sessions = [Session(name="cd-api")]
    manager = _manager(settings, sessions)
    assert manager.list_sessions() == sessions
    assert manager.refresh() == sessions
    assert manager.detector.calls == 2


def test_session_name_adds_prefix_once(settings):
    manager = _manager(settings)
    assert manager.session_name("api") == "cd-api"
    assert manager.session_name("cd-api") == "cd-api"


def test_create_runs_target_program(monkeypatch, settings, tmp_path):
    calls = capture_tmux(monkeypatch, {})
    name = _manager(settings).create("api", str(tmp_path), "--model opus")
    assert name == "cd-api"
    assert calls == [[
        "tmux", "new-session", "-d", "-s", "cd-api",
        "-c", str(tmp_path), "claude --model opus",
    ]]


def test_create_uses_default_dir(monkeypatch, settings, tmp_path):
    settings.default_dir = str(tmp_path)
    calls = capture_tmux(monkeypatch, {})
    _manager(settings).create("api")
    assert calls[0][5:] == ["-c", str(tmp_path), "claude"]


def test_create_reports_tmux_error(monkeypatch, settings, tmp_path):
    capture_tmux(monkeypatch, {
        "new-session": completed(returncode=1, stderr="duplicate session: cd-api"),
    })
    with pytest.raises(TmuxError, match="duplicate session"):
        _manager(settings).create("api", str(tmp_path))


def test_kill_by_name_and_session(monkeypatch, settings):
    calls = capture_tmux(monkeypatch, {})
    manager = _manager(settings)
    manager.kill("cd-api")
    manager.kill(Session(name="cd-web"))
    assert calls == [
        ["tmux", "kill-session", "-t", "cd-api"],
        ["tmux", "kill-session", "-t", "cd-web"],
    ]


def test_terminal_sessions_are_read_only(monkeypatch, settings):
    calls = capture_tmux(monkeypatch, {})
    manager = _manager(settings)
    with pytest.raises(ReadOnlySessionError):
        manager.kill(_terminal())
    with pytest.raises(ReadOnlySessionError):
        manager.logs(_terminal())
    with pytest.raises(ReadOnlySessionError):
        manager.send(_terminal(), "hi")
    with pytest.raises(ReadOnlySessionError):
        manager.attach_argv(_terminal())
    assert calls == []


def test_read_only_error_is_tmux_error():
    assert issubclass(ReadOnlySessionError, TmuxError)


def test_kill_idle_only_touches_managed_idle(monkeypatch, settings):
    killed: list[str] = []
    monkeypatch.setattr(tmux, "kill_session", lambda name, timeout=5: killed.append(name))
    sessions = [
        Session(name="cd-a", status=Status.IDLE),
        Session(name="cd-b", status=Status.ACTIVE),
        Session(name="cd-c", status=Status.WAITING),
        Session(name="terminal/pts/1", status=Status.IDLE, managed=False),
        Session(name="cd-d", status=Status.IDLE),
    ]
    assert _manager(settings).kill_idle(sessions) == ["cd-a", "cd-d"]
    assert killed == ["cd-a", "cd-d"]


def test_kill_idle_continues_past_failures(monkeypatch, settings):
    def _kill(name, timeout=5):
        if name == "cd-a":
            raise TmuxError("gone")

    monkeypatch.setattr(tmux, "kill_session", _kill)
    sessions = [
        Session(name="cd-a", status=Status.IDLE),
        Session(name="cd-b", status=Status.IDLE),
    ]
    assert _manager(settings).kill_idle(sessions) == ["cd-b"]


def test_logs_uses_configured_history(monkeypatch, settings):
    calls = capture_tmux(monkeypatch, {"capture-pane": completed("line\n")})
    manager = _manager(settings)
    assert manager.logs("cd-api") == "line\n"
    assert calls[-1][-2:] == ["-S", "-1000"]
    manager.logs("cd-api", lines=50)
    assert calls[-1][-2:] == ["-S", "-50"]


def test_logs_capture_failure_raises(monkeypatch, settings):
    capture_tmux(monkeypatch, {"capture-pane": None})
    with pytest.raises(TmuxError):
        _manager(settings).logs("cd-api")


def test_send_and_attach(monkeypatch, settings):
    monkeypatch.delenv("TMUX", raising=False)
    calls = capture_tmux(monkeypatch, {})
    manager = _manager(settings)
    manager.send(Session(name="cd-api"), "/compact")
    assert calls == [["tmux", "send-keys", "-t", "cd-api", "/compact", "Enter"]]
    assert manager.attach_argv("cd-api") == ["tmux", "attach-session", "-t", "cd-api"]


def test_default_session_name_replaces_unsafe_characters():
    assert default_session_name("/home/me/my.app", home="/home/me") == "my-app"
    assert default_session_name("/home/me/side project/v1.2", home="/home/me") == (
        "side-project-v1-2"
    )


def test_dotted_directory_name_creates_session(monkeypatch, settings, tmp_path):
    calls = capture_tmux(monkeypatch, {})
    name = default_session_name("/home/me/my.app", home="/home/me")
    assert _manager(settings).create(name, str(tmp_path)) == "cd-my-app"
    assert calls[0][:5] == ["tmux", "new-session", "-d", "-s", "cd-my-app"]


def test_injected_detector_is_kept(settings):
    detector = _FakeDetector([])
    assert SessionManager(settings, detector=detector).detector is detector


def test_exists_checks_prefixed_name(monkeypatch, settings):
    calls = capture_tmux(monkeypatch, {"has-session": completed()})
    assert _manager(settings).exists("api")
    assert calls == [["tmux", "has-session", "-t", "=cd-api"]]
