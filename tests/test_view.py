"""Tests for pmreview.lib.view module."""

import json

from pmreview.lib.view import (
    format_content,
    format_steps,
    format_timestamp,
    preview_text,
    source_label,
    stats_text,
)
from pmreview.pm.content import normalize
from pmreview.pm.models import CanonicalContent

from conftest import SINGLE_STORY_DIRECT


class TestPreviewText:
    """Tests for preview_text()."""

    def test_initiative_summary(self, make_review):
        assert preview_text(make_review()) == "Self-serve onboarding"

    def test_server_summary_wins(self, make_review):
        review = make_review(preview={"summary": "From server", "initiative_count": 1})
        assert preview_text(review) == "From server"

    def test_edited_summary_wins(self, make_review):
        review = make_review(edited_json=json.dumps(SINGLE_STORY_DIRECT))
        assert preview_text(review) == "S"

    def test_malformed_content_falls_back_to_input(self, make_review):
        """Undecodable content shows the input text instead."""
        review = make_review(generated_json="{not json", input_content="a" * 151)
        assert preview_text(review) == "a" * 150 + "..."

    def test_input_at_limit_is_not_cut(self, make_review):
        review = make_review(generated_json="{not json", input_content="a" * 150)
        assert preview_text(review) == "a" * 150

    def test_nothing_available(self, make_review):
        review = make_review(generated_json=None, input_content="")
        assert preview_text(review) == "No content available"

    def test_custom_length(self, make_review):
        assert preview_text(make_review(), 9) == "Self-serv..."

    def test_bracketed_server_summary_cut_at_limit(self, make_review):
        summary = "[MVP] " + "a" * 143 + "\\" + "c"
        review = make_review(preview={"summary": summary, "initiative_count": 1})
        assert preview_text(review) == summary[:150] + "..."


class TestStatsText:
    """Tests for stats_text()."""

    def test_computed_from_content(self, make_review):
        assert stats_text(make_review()) == "1 initiative, 2 epics, 3 stories"

    def test_server_stats_win(self, make_review):
        review = make_review(preview={"initiative_count": 2, "epic_count": 4, "story_count": 9})
        assert stats_text(review) == "2 initiatives, 4 epics, 9 stories"

    def test_unreadable_content(self, make_review):
        assert stats_text(make_review(generated_json="{not json")) == ""


class TestSourceLabel:
    """Tests for source_label()."""

    def test_known(self):
        assert source_label("webhook") == "n8n Pipeline"
        assert source_label("manual") == "Manual"

    def test_unknown_passes_through(self):
        assert source_label("slack") == "slack"
        assert source_label("") == "unknown"


class TestFormatSteps:
    """Tests for format_steps()."""

    def test_markers(self):
        assert format_steps("approved").splitlines() == [
            "[x] Pending Review - Generated content awaiting review",
            "[>] Review Complete - Content reviewed and approved",
            "[ ] Jira Tickets Created - Tickets successfully created in Jira",
        ]

    def test_rejected(self):
        lines = format_steps("rejected").splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("[>] Rejected")


class TestFormatContent:
    """Tests for format_content()."""

    def test_renders_hierarchy(self, direct_content):
        text = format_content(normalize(direct_content).content)
        assert "Initiative: Self-serve onboarding" in text
        assert "Stakeholders: Product, Support" in text
        assert "Epic: Signup" in text
        assert "Epic: Billing" in text
        assert "As a:    user 3" in text
        assert "- criterion 1.2" in text
        assert "Product: Owns the funnel" in text
        assert "Total Stories: 3  Status: Ready for Jira" in text

    def test_needs_review(self):
        text = format_content(normalize(SINGLE_STORY_DIRECT).content)
        assert "Status: Needs Review" in text
        assert "Stakeholder Context" not in text

    def test_no_initiative(self):
        assert format_content(CanonicalContent(initiative=None)) == "No initiatives found in content"


class TestFormatTimestamp:
    """Tests for format_timestamp()."""

    def test_iso_with_z(self):
        assert format_timestamp("2025-03-01T10:15:42Z") == "2025-03-01 10:15"

    def test_unparseable_passes_through(self):
        assert format_timestamp("yesterday") == "yesterday"

    def test_empty(self):
        assert format_timestamp(None) == ""
