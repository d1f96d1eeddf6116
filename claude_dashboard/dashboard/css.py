"""All CSS strings for the dashboard."""


def _button_row_css(row_id: str, *, button_margin: str = "0 1") -> str:
    return (
        f"#{row_id} {{\n"
        "    height: 3;\n"
        "    align: center middle;\n"
        "}\n\n"
        f"#{row_id} Button {{\n"
        f"    margin: {button_margin};\n"
        "}\n"
    )


APP_CSS = """
Screen {
    background: #000000;
}

#title-bar {
    height: 1;
    background: #1a1024;
    color: #d78700;
    padding: 0 1;
}

#title-text {
    width: auto;
    color: #d78700;
    text-style: bold;
}

#title-clock {
    color: #5a4a3a;
}

#filter-input {
    height: 3;
    margin: 0 1;
    border: round #5a4a3a;
}

#filter-input.hidden {
    display: none;
}

#session-table {
    height: 1fr;
    margin: 1 1 0 1;
    background: #050505;
}

#status-line {
    height: 1;
    padding: 0 1;
    background: #1a1024;
    color: #888888;
}

#status-line.error {
    color: #ff5f5f;
}
"""

NEW_SESSION_CSS = f"""
NewSessionScreen {{
    align: center middle;
    background: transparent;
}}

#new-session-dialog {{
    width: 70;
    height: auto;
    border: thick #d78700;
    background: #0a0a0a;
    padding: 1 3;
}}

#new-session-dialog Label {{
    margin: 1 0 0 0;
    color: #cccccc;
}}

#new-session-error {{
    color: #ff5f5f;
    height: auto;
}}

{_button_row_css("new-session-buttons")}
"""

CONFIRM_KILL_CSS = f"""
ConfirmKillScreen, ConfirmKillIdleScreen {{
    align: center middle;
    background: transparent;
}}

#confirm-kill-dialog {{
    width: 60;
    height: auto;
    max-height: 14;
    border: thick #ff3366;
    background: #0a0a0a;
    padding: 2 3;
}}

#confirm-kill-dialog Label {{
    width: 100%;
    content-align: center middle;
    margin: 0 0 1 0;
    color: #cccccc;
}}

{_button_row_css("confirm-kill-buttons")}
"""

LOGS_CSS = """
LogsScreen {
    align: center middle;
    background: transparent;
}

#logs-dialog {
    width: 95%;
    height: 90%;
    border: solid #d78700;
    background: #0a0a0a;
    padding: 0 1;
}

#logs-title {
    color: #d78700;
    text-style: bold;
}

#logs-body {
    height: 1fr;
}
"""

HELP_CSS = """
HelpScreen {
    align: center middle;
    background: transparent;
}

#help-dialog {
    width: 60;
    height: auto;
    max-height: 30;
    border: solid #d78700;
    background: #0a0a0a;
    padding: 1 3;
}

.help-title {
    color: #d78700;
    text-style: bold;
    margin: 0 0 1 0;
}

.help-row {
    height: 1;
}

.help-key {
    width: 12;
    color: #ffd75f;
}

.help-desc {
    color: #cccccc;
}

.help-footer {
    color: #5a4a3a;
    margin: 1 0 0 0;
}
"""
