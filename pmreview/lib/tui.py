"""Shared TUI components for pmr commands."""

from typing import Optional

from rich.markup import escape
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Static


class ConfirmModal(ModalScreen[bool]):
    """Yes/no confirmation for a review action.

    title and detail are plain text and are escaped before rendering, so
    review summaries containing square brackets display as typed.
    """

    CSS = """
    ConfirmModal {
        align: center middle;
    }

    #confirm-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #confirm-detail {
        color: $text-muted;
        margin-bottom: 1;
    }

    #confirm-hint {
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, title: str, detail: Optional[str] = None) -> None:
        super().__init__()
        self.confirm_title = title
        self.detail = detail

    def compose(self) -> ComposeResult:
        widgets = [Static(escape(self.confirm_title), id="confirm-title")]
        if self.detail:
            widgets.append(Static(escape(self.detail), id="confirm-detail"))
        widgets.append(Static("\\[y]es / \\[n]o", id="confirm-hint"))
        yield Container(*widgets, id="confirm-dialog")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class ReasonModal(ModalScreen[str | None]):
    """Modal for entering optional free text, e.g. a rejection reason.

    Dismisses with the entered text (possibly empty) on Enter, or None on
    Escape so callers can tell "no reason" from "cancelled".
    """

    CSS = """
    ReasonModal {
        align: center middle;
    }

    #reason-dialog {
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    #reason-label {
        margin-bottom: 1;
    }

    #reason-hint {
        margin-top: 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, prompt: str = "Reason (optional):") -> None:
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        yield Container(
            Label(escape(self.prompt), id="reason-label"),
            Input(placeholder="Enter reason...", id="reason-input"),
            Label("Press Enter to submit, Escape to cancel", id="reason-hint"),
            id="reason-dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#reason-input", Input).focus()

    @on(Input.Submitted)
    def on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)
