"""Session status detection from tmux activity and pane text."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import time

from .models import Status

_CONFIRM_PATTERNS: tuple[str, ...] = ("(y/n)", "(Y/n)", "(y/N)", "Y/n", "y/N")
_PROMPT_GLYPH = "❯"

# Used for every undecided case: stale session with no recognizable line,
# or a pane that could not be captured.
FALLBACK_STATUS = Status.IDLE


@dataclass(frozen=True)
class StatusRule:
    """Maps a pane line to a status.

    A decisive rule ends the scan on its first hit. A non-decisive rule
    only records its status; older lines may still hit a decisive rule
    (a question sitting above Claude's ``❯`` selection menu is WAITING).
    """

    name: str
    predicate: Callable[[str], bool]
    status: Status
    decisive: bool = True


def _is_confirmation(line: str) -> bool:
    return any(p in line for p in _CONFIRM_PATTERNS)


def _is_question(line: str) -> bool:
    # Anchored to the end so prose containing '?' does not count.
    return line.endswith("?")


def _is_shell_prompt(line: str) -> bool:
    # '$' anchored to the end so "$HOME" in output does not count.
    return line.startswith(">") or _PROMPT_GLYPH in line or line.endswith("$")


PANE_RULES: tuple[StatusRule, ...] = (
    StatusRule("confirm-prompt", _is_confirmation, Status.WAITING),
    StatusRule("question", _is_question, Status.WAITING),
    StatusRule("shell-prompt", _is_shell_prompt, Status.IDLE, decisive=False),
)


def classify_pane_text(
    text: str,
    max_lines: int = 20,
    rules: tuple[StatusRule, ...] = PANE_RULES,
) -> Status | None:
    """Classify the tail of a pane, or None if no line matches any rule.

    Lines are visited newest first and each line is tested against the
    rules in order; the first rule that hits a line wins for that line.
    """
    lines = text.splitlines()[-max_lines:] if max_lines > 0 else []
    pending: Status | None = None
    for raw in reversed(lines):
        line = raw.strip()
        if not line:
            continue
        for rule in rules:
            if not rule.predicate(line):
                continue
            if rule.decisive:
                return rule.status
            if pending is None:
                pending = rule.status
            break
    return pending


def is_recent(last_activity: float, now: float, window: float) -> bool:
    """True when last_activity is a real timestamp within window of now."""
    if last_activity <= 0:
        return False
    return now - last_activity < window


def detect_status(
    last_activity: float,
    capture: Callable[[], str | None],
    *,
    now: float | None = None,
    active_window: float = 2.0,
    max_lines: int = 20,
) -> Status:
    """Determine a tmux session's status.

    Fresh activity means output is still streaming, so the pane is not even
    captured. Otherwise the pane tail decides between WAITING and IDLE.
    """
    if now is None:
        now = time.time()
    if is_recent(last_activity, now, active_window):
        return Status.ACTIVE

    content = capture()
    if content is None:
        return FALLBACK_STATUS
    return classify_pane_text(content, max_lines) or FALLBACK_STATUS
