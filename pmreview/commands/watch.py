"""
pmr watch - Review dashboard.

Interactive TUI listing reviews with previews, the selected review's
workflow progress and content, and approve/reject actions.
"""

from typing import Optional

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.lib.tui import ConfirmModal, ReasonModal
from pmreview.lib.view import (
    STEP_MARKERS,
    format_content,
    format_timestamp,
    preview_text,
    source_label,
    stats_text,
)
from pmreview.pm.content import active_content
from pmreview.pm.models import ReviewRecord
from pmreview.workflow.actions import ActionOutcome, ReviewActions
from pmreview.workflow.fsm import available_actions
from pmreview.workflow.state_machine import StepState, derive_steps, status_presentation

STEP_STYLES = {
    StepState.COMPLETED: "green",
    StepState.ACTIVE: "bold cyan",
    StepState.PENDING: "dim",
}


def format_review_row(review: ReviewRecord, selected: bool = False) -> str:
    """One list entry (two lines) with Rich markup."""
    badge = status_presentation(review.status)
    pointer = "[reverse]>[/reverse]" if selected else " "
    created = format_timestamp(review.created_at)
    head = (
        f"{pointer} [{badge.style}]{escape(f'[{badge.symbol}]')} {badge.label:<9}[/{badge.style}]"
        f" {escape(review.id)}  [dim]{escape(source_label(review.source))} {created}[/dim]"
    )
    body = f"    {escape(preview_text(review))}"
    stats = stats_text(review)
    if stats:
        body += f"  [dim]{escape(stats)}[/dim]"
    return f"{head}\n{body}"


def render_review_detail(review: ReviewRecord) -> str:
    """Detail pane: header, workflow steps, content, original input."""
    badge = status_presentation(review.status)
    lines = [
        f"[bold]{escape(review.id)}[/bold]  [{badge.style}]{badge.label}[/{badge.style}]",
        f"Type: {escape(review.content_type)}  Source: {escape(source_label(review.source))}",
        f"Created: {format_timestamp(review.created_at)}",
    ]
    if review.reviewed_at:
        lines.append(f"Last updated: {format_timestamp(review.reviewed_at)}")
    if review.ticket_references:
        lines.append(f"Jira Tickets: [green]{escape(', '.join(review.ticket_references))}[/green]")

    lines.append("")
    lines.append("[bold]Workflow[/bold]")
    for step in derive_steps(review.status):
        style = STEP_STYLES[step.state]
        lines.append(f"  [{style}]{escape(STEP_MARKERS[step.state])} {escape(step.title)}[/{style}]")

    lines.append("")
    lines.append("[bold]Content (edited)[/bold]" if review.has_edits else "[bold]Content[/bold]")
    normalized = active_content(review)
    if normalized.ok:
        lines.append(escape(format_content(normalized.content)))
    else:
        lines.append(f"[red]{escape(str(normalized.error))}[/red]")

    lines.append("")
    lines.append("[bold]Original Input[/bold]")
    lines.append(escape(review.input_content or "(empty)"))
    return "\n".join(lines)


def render_action_bar(review: Optional[ReviewRecord], busy: bool) -> str:
    """Key hints for the selected review."""
    if busy:
        return "[yellow]Working...[/yellow]"
    hints = []
    if review is not None:
        actions = available_actions(review.status)
        if "approve" in actions:
            hints.append("\\[a]pprove")
        if "reject" in actions:
            hints.append("\\[r]eject")
    hints.extend(["\\[g] refresh", "\\[q]uit"])
    return "  ".join(hints)


class ReviewListWidget(Static):
    """Review list with a selection pointer."""

    reviews: reactive[list] = reactive(list, always_update=True)
    selected: reactive[int] = reactive(0)

    def render(self) -> str:
        if not self.reviews:
            return "[dim]No reviews found. Press g to refresh.[/dim]"
        return "\n".join(
            format_review_row(review, i == self.selected)
            for i, review in enumerate(self.reviews)
        )


class ReviewDetailWidget(Static):
    """Selected review details."""

    review: reactive[Optional[ReviewRecord]] = reactive(None, always_update=True)

    def render(self) -> str:
        if self.review is None:
            return "[dim]Select a review[/dim]"
        return render_review_detail(self.review)


class ReviewDashboardApp(App):
    """Main dashboard TUI application."""

    TITLE = "PM Orchestration Engine"

    CSS = """
    #main-container {
        layout: horizontal;
        padding: 1;
    }

    #list-box {
        border: solid blue;
        width: 1fr;
        padding: 0 1;
    }

    #detail-box {
        border: solid green;
        width: 1fr;
        padding: 0 1;
    }

    #action-bar {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("j", "next", "Next", show=False),
        Binding("down", "next", "Next", show=False),
        Binding("k", "prev", "Prev", show=False),
        Binding("up", "prev", "Prev", show=False),
        Binding("a", "approve", "Approve"),
        Binding("r", "reject", "Reject"),
        Binding("g", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, config: ApiConfig, client: ReviewApiClient | None = None) -> None:
        super().__init__()
        self.config = config
        self.client = client or ReviewApiClient(config)
        self.actions = ReviewActions(self.client)
        self.reviews: list[ReviewRecord] = []
        self.selected = 0

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            VerticalScroll(ReviewListWidget(id="review-list"), id="list-box"),
            VerticalScroll(ReviewDetailWidget(id="review-detail"), id="detail-box"),
            id="main-container",
        )
        yield Static(id="action-bar")
        yield Footer()

    async def on_mount(self) -> None:
        await self.load_reviews()

    async def on_unmount(self) -> None:
        await self.client.aclose()

    @property
    def current(self) -> Optional[ReviewRecord]:
        if not self.reviews:
            return None
        return self.reviews[self.selected]

    def _refresh_widgets(self) -> None:
        review_list = self.query_one("#review-list", ReviewListWidget)
        review_list.reviews = self.reviews
        review_list.selected = self.selected
        self.query_one("#review-detail", ReviewDetailWidget).review = self.current
        busy = self.current is not None and self.actions.busy(self.current.id)
        self.query_one("#action-bar", Static).update(render_action_bar(self.current, busy))

    async def load_reviews(self) -> None:
        """Fetch the review list. Failures are shown; retry with g."""
        result = await self.client.list_reviews()
        if not result.success:
            self.notify(f"Failed to load reviews: {result.error}", severity="error")
            return
        current_id = self.current.id if self.current else None
        self.reviews = result.data
        self.selected = 0
        for i, review in enumerate(self.reviews):
            if review.id == current_id:
                self.selected = i
                break
        self._refresh_widgets()

    def _replace(self, record: ReviewRecord) -> None:
        for i, review in enumerate(self.reviews):
            if review.id == record.id:
                self.reviews[i] = record
                break

    def _apply_outcome(self, outcome: ActionOutcome) -> None:
        if outcome.ok:
            self._replace(outcome.record)
            if outcome.message:
                self.notify(outcome.message, severity="information")
        else:
            self.notify(str(outcome.error), severity="error")
        self._refresh_widgets()

    def action_next(self) -> None:
        if self.reviews and self.selected < len(self.reviews) - 1:
            self.selected += 1
            self._refresh_widgets()

    def action_prev(self) -> None:
        if self.reviews and self.selected > 0:
            self.selected -= 1
            self._refresh_widgets()

    async def action_refresh(self) -> None:
        await self.load_reviews()

    def _can_act(self, review: Optional[ReviewRecord], action: str) -> bool:
        if review is None:
            return False
        if self.actions.busy(review.id):
            self.notify("An action is already in progress for this review", severity="warning")
            return False
        if action not in available_actions(review.status):
            self.notify(f"Review is not pending (status: {review.status})", severity="warning")
            return False
        return True

    def action_approve(self) -> None:
        review = self.current
        if not self._can_act(review, "approve"):
            return

        async def on_confirm(confirmed: bool) -> None:
            if not confirmed:
                return
            self.query_one("#action-bar", Static).update(render_action_bar(review, busy=True))
            self._apply_outcome(await self.actions.approve(review))

        detail = preview_text(review)
        stats = stats_text(review)
        if stats:
            detail += f"\n{stats}"
        self.push_screen(
            ConfirmModal(f"Approve review {review.id} and create Jira tickets?", detail=detail),
            on_confirm,
        )

    def action_reject(self) -> None:
        review = self.current
        if not self._can_act(review, "reject"):
            return

        async def on_reason(reason: str | None) -> None:
            if reason is None:
                return
            self.query_one("#action-bar", Static).update(render_action_bar(review, busy=True))
            self._apply_outcome(await self.actions.reject(review, reason or None))

        self.push_screen(ReasonModal(f"Reject review {review.id}? Reason (optional):"), on_reason)


def cmd_watch(args, config: ApiConfig) -> int:
    """Run the review dashboard."""
    app = ReviewDashboardApp(config)
    app.run()
    return 0
