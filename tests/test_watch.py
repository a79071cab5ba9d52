"""Tests for pmr watch render helpers and dashboard app."""

import httpx

from pmreview.commands.watch import (
    ReviewDashboardApp,
    ReviewDetailWidget,
    ReviewListWidget,
    format_review_row,
    render_action_bar,
    render_review_detail,
)
from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.lib.tui import ConfirmModal

CONFIG = ApiConfig(base_url="http://api.test", api_key="secret-key")


class TestFormatReviewRow:
    """Tests for format_review_row."""

    def test_contains_summary_and_badge(self, make_review):
        row = format_review_row(make_review())
        assert "rev-001" in row
        assert "Pending" in row
        assert "n8n Pipeline" in row
        assert "Self-serve onboarding" in row
        assert "1 initiative, 2 epics, 3 stories" in row

    def test_selected_pointer(self, make_review):
        assert format_review_row(make_review(), selected=True).startswith("[reverse]>")
        assert not format_review_row(make_review()).startswith("[reverse]")

    def test_preview_uses_full_budget(self, make_review):
        review = make_review(preview={"summary": "b" * 151})
        assert "b" * 150 + "..." in format_review_row(review)

    def test_markup_in_input_is_escaped(self, make_review):
        """Square brackets from content must not be read as Rich markup."""
        review = make_review(generated_json="{not json", input_content="[bold]raw[/bold]")
        assert "\\[bold]raw\\[/bold]" in format_review_row(review)


class TestRenderReviewDetail:
    """Tests for render_review_detail."""

    def test_pending_review(self, make_review):
        text = render_review_detail(make_review())
        assert "Pending Review" in text
        assert "Initiative: Self-serve onboarding" in text
        assert "[bold]Content[/bold]" in text
        assert "We need self-serve onboarding" in text

    def test_created_review_lists_tickets(self, make_review):
        text = render_review_detail(make_review(status="created", jira_tickets=["PROJ-1", "PROJ-2"]))
        assert "PROJ-1, PROJ-2" in text

    def test_edited_invalid_content_shows_error(self, make_review):
        text = render_review_detail(make_review(edited_json="{broken"))
        assert "Content (edited)" in text
        assert "[red]Invalid JSON content:" in text


class TestRenderActionBar:
    """Tests for render_action_bar."""

    def test_pending_offers_actions(self, make_review):
        bar = render_action_bar(make_review(), busy=False)
        assert "\\[a]pprove" in bar
        assert "\\[r]eject" in bar

    def test_created_offers_no_actions(self, make_review):
        bar = render_action_bar(make_review(status="created"), busy=False)
        assert "pprove" not in bar
        assert "\\[q]uit" in bar

    def test_busy(self, make_review):
        assert render_action_bar(make_review(), busy=True) == "[yellow]Working...[/yellow]"

    def test_no_selection(self):
        assert render_action_bar(None, busy=False) == "\\[g] refresh  \\[q]uit"


class TestReviewDashboardApp:
    """Tests for the dashboard app driven through Textual's pilot."""

    async def test_loads_and_navigates(self, review_data):
        second = dict(review_data, id="rev-002", status="created")

        def handler(request):
            return httpx.Response(200, json={"success": True, "data": [review_data, second]})

        client = ReviewApiClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        app = ReviewDashboardApp(CONFIG, client=client)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert [r.id for r in app.reviews] == ["rev-001", "rev-002"]
            assert app.query_one("#review-detail", ReviewDetailWidget).review.id == "rev-001"

            await pilot.press("j")
            assert app.selected == 1
            assert app.query_one("#review-list", ReviewListWidget).selected == 1
            assert app.query_one("#review-detail", ReviewDetailWidget).review.id == "rev-002"

            await pilot.press("k")
            assert app.selected == 0

    async def test_approve_confirm_flow(self, review_data):
        """Cancelling sends nothing; confirming approves and updates the row."""
        requests = []

        def handler(request):
            requests.append((request.method, request.url.path))
            if request.url.path.endswith("/approve"):
                return httpx.Response(200, json={"success": True, "data": {"jiraTickets": ["PROJ-1"]}})
            if request.url.path == "/api/reviews":
                return httpx.Response(200, json={"success": True, "data": [review_data]})
            created = dict(review_data, status="created", jira_tickets=["PROJ-1"])
            return httpx.Response(200, json={"success": True, "data": created})

        client = ReviewApiClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        app = ReviewDashboardApp(CONFIG, client=client)
        async with app.run_test() as pilot:
            await pilot.pause()

            await pilot.press("a")
            await pilot.pause()
            assert isinstance(app.screen, ConfirmModal)
            assert app.screen.detail.startswith("Self-serve onboarding")
            assert len(app.screen.query("#confirm-detail")) == 1
            await pilot.press("n")
            await pilot.pause()
            assert ("POST", "/api/reviews/rev-001/approve") not in requests

            await pilot.press("a")
            await pilot.pause()
            await pilot.press("y")
            await pilot.pause()
            await pilot.pause(0.2)
            assert ("POST", "/api/reviews/rev-001/approve") in requests
            assert app.reviews[0].status == "created"
            assert app.reviews[0].ticket_references == ("PROJ-1",)
