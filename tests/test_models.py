"""Tests for pmreview.pm.models module."""

import dataclasses
import logging

import pytest

from pmreview.pm.models import (
    CanonicalContent,
    Epic,
    Initiative,
    PreviewStats,
    ReviewRecord,
    Story,
    parse_ticket_references,
)


class TestParseTicketReferences:
    """Tests for parse_ticket_references()."""

    def test_none(self):
        assert parse_ticket_references(None) == []

    def test_list(self):
        assert parse_ticket_references(["PROJ-1", "PROJ-2"]) == ["PROJ-1", "PROJ-2"]

    def test_list_drops_blank_entries(self):
        assert parse_ticket_references(["PROJ-1", "", None, " "]) == ["PROJ-1"]

    def test_json_array_string(self):
        assert parse_ticket_references('["PROJ-1", "PROJ-2"]') == ["PROJ-1", "PROJ-2"]

    def test_comma_separated(self):
        assert parse_ticket_references("PROJ-1, PROJ-2,") == ["PROJ-1", "PROJ-2"]

    def test_single_key(self):
        assert parse_ticket_references("PROJ-7") == ["PROJ-7"]

    def test_empty_string(self):
        assert parse_ticket_references("  ") == []

    def test_broken_json_array_falls_back_to_split(self):
        assert parse_ticket_references("[PROJ-1") == ["[PROJ-1"]


class TestPreviewStats:
    """Tests for PreviewStats."""

    def test_from_dict(self):
        stats = PreviewStats.from_dict(
            {"summary": "Onboarding", "initiative_count": 1, "epic_count": 2, "story_count": 5}
        )
        assert stats == PreviewStats("Onboarding", 1, 2, 5)

    def test_missing_counts_are_zero(self):
        stats = PreviewStats.from_dict({"epic_count": None})
        assert stats == PreviewStats(None, 0, 0, 0)

    def test_empty_summary_is_none(self):
        assert PreviewStats.from_dict({"summary": ""}).summary is None

    def test_to_dict_round_trip(self):
        stats = PreviewStats("S", 1, 2, 3)
        assert PreviewStats.from_dict(stats.to_dict()) == stats


class TestCanonicalContent:
    """Tests for CanonicalContent counts and serialization."""

    def test_counts_without_initiative(self):
        content = CanonicalContent(initiative=None)
        assert (content.initiative_count, content.epic_count, content.story_count) == (0, 0, 0)

    def test_counts(self):
        epics = [
            Epic("E1", "", [Story("a", "b", "c"), Story("d", "e", "f")]),
            Epic("E2", "", []),
        ]
        content = CanonicalContent(initiative=Initiative("I", "", epics=epics))
        assert (content.initiative_count, content.epic_count, content.story_count) == (1, 2, 2)

    def test_story_uses_wire_keys(self):
        story = Story("user", "thing", "value", ["works"])
        assert story.to_dict() == {
            "asA": "user",
            "iWant": "thing",
            "soThat": "value",
            "acceptanceCriteria": ["works"],
        }

    def test_key_emitted_when_set(self):
        assert Epic("E", "", key="PROJ-9").to_dict()["key"] == "PROJ-9"
        assert "key" not in Epic("E", "").to_dict()


class TestReviewRecord:
    """Tests for ReviewRecord wire mapping."""

    def test_from_dict_maps_wire_keys(self, review_data, direct_content):
        review_data.update({
            "edited_json": '{"initiative": {}}',
            "jira_tickets": '["PROJ-1"]',
            "reviewed_at": "2025-03-02T09:00:00Z",
            "context_used": "Confluence: onboarding",
            "additional_context": "Focus on SMB",
            "output_location": "PROJ",
            "preview": {"summary": "Onboarding", "initiative_count": 1, "epic_count": 2, "story_count": 3},
        })
        record = ReviewRecord.from_dict(review_data)
        assert record.id == "rev-001"
        assert record.source == "webhook"
        assert record.content_type == "jira-tickets"
        assert record.status == "pending"
        assert record.generated_content == direct_content
        assert record.edited_content == '{"initiative": {}}'
        assert record.ticket_references == ("PROJ-1",)
        assert record.reviewed_at == "2025-03-02T09:00:00Z"
        assert record.preview_stats == PreviewStats("Onboarding", 1, 2, 3)
        assert record.created_by == "n8n"
        assert record.context_used == "Confluence: onboarding"
        assert record.additional_context == "Focus on SMB"
        assert record.output_location == "PROJ"

    def test_integer_id_becomes_string(self, review_data):
        review_data["id"] = 42
        assert ReviewRecord.from_dict(review_data).id == "42"

    def test_minimal_record(self):
        record = ReviewRecord.from_dict({"id": "r1"})
        assert record.status == ""
        assert record.input_content == ""
        assert record.generated_content is None
        assert record.ticket_references == ()
        assert record.preview_stats is None

    def test_unknown_source_is_kept(self, review_data, caplog):
        review_data["source"] = "slack"
        with caplog.at_level(logging.DEBUG, logger="pmreview.pm.models"):
            record = ReviewRecord.from_dict(review_data)
        assert record.source == "slack"
        assert "unrecognized source" in caplog.text

    def test_has_edits(self, make_review):
        assert not make_review().has_edits
        assert not make_review(edited_json="").has_edits
        assert make_review(edited_json="{}").has_edits
        assert make_review(edited_json={"initiative": {}}).has_edits

    def test_to_dict_round_trip(self, review_data):
        review_data.update({"jira_tickets": ["PROJ-1", "PROJ-2"], "reviewed_at": "2025-03-02T09:00:00Z"})
        record = ReviewRecord.from_dict(review_data)
        assert ReviewRecord.from_dict(record.to_dict()) == record

    def test_to_dict_omits_unset_optionals(self, make_review):
        data = make_review().to_dict()
        assert "edited_json" not in data
        assert "jira_tickets" not in data
        assert "preview" not in data

    def test_is_frozen(self, make_review):
        record = make_review()
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.status = "approved"
