"""Tests for pmreview.lib.validate module."""

import pytest

from pmreview.lib.validate import ValidationError, is_valid, validate


class TestValidate:
    """Tests for schema validation of service payloads."""

    def test_valid_envelope(self):
        validate({"success": True, "data": [1, 2]}, "envelope")

    def test_envelope_requires_success(self):
        with pytest.raises(ValidationError) as exc:
            validate({"data": []}, "envelope")
        assert exc.value.schema_name == "envelope"
        assert "success" in str(exc.value)

    def test_error_reports_path(self):
        with pytest.raises(ValidationError) as exc:
            validate({"id": "r1", "preview": {"epic_count": -1}}, "review")
        assert exc.value.path == "preview.epic_count"

    def test_review_accepts_text_or_structured_content(self):
        assert is_valid({"id": "r1", "generated_json": "{}"}, "review")
        assert is_valid({"id": "r1", "generated_json": {"initiative": {}}}, "review")
        assert not is_valid({"id": "r1", "generated_json": 5}, "review")

    def test_review_requires_id(self):
        assert not is_valid({"status": "pending"}, "review")

    def test_unknown_schema(self):
        with pytest.raises(ValidationError, match="Schema file not found"):
            validate({}, "no-such-schema")
