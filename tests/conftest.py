"""Shared fixtures for pmreview tests."""

import copy

import pytest

from pmreview.pm.models import ReviewRecord


SINGLE_STORY_DIRECT = {
    "initiative": {
        "summary": "S",
        "description": "D",
        "epics": [
            {
                "summary": "E",
                "description": "d",
                "stories": [
                    {"asA": "a", "iWant": "b", "soThat": "c", "acceptanceCriteria": ["x"]}
                ],
            }
        ],
    }
}


def _story(n: int) -> dict:
    return {
        "asA": f"user {n}",
        "iWant": f"feature {n}",
        "soThat": f"benefit {n}",
        "acceptanceCriteria": [f"criterion {n}.1", f"criterion {n}.2"],
    }


@pytest.fixture
def direct_content() -> dict:
    """Current-schema content: one initiative, two epics, three stories."""
    return {
        "initiative": {
            "summary": "Self-serve onboarding",
            "description": "Let new customers onboard without sales",
            "stakeholders": ["Product", "Support"],
            "epics": [
                {"summary": "Signup", "description": "Account creation", "stories": [_story(1), _story(2)]},
                {"summary": "Billing", "description": "Card capture", "stories": [_story(3)]},
            ],
        },
        "stakeholderContext": {"Product": "Owns the funnel", "Support": "Fewer tickets"},
        "totalStories": 3,
        "readyForJira": True,
    }


@pytest.fixture
def legacy_content(direct_content) -> dict:
    """Legacy wrapped-array form of direct_content."""
    content = copy.deepcopy(direct_content)
    return {
        "data": [
            {
                "initiative": content["initiative"],
                "stakeholderContext": content["stakeholderContext"],
            }
        ],
        "totalStories": content["totalStories"],
        "readyForJira": content["readyForJira"],
    }


@pytest.fixture
def review_data(direct_content) -> dict:
    """Wire representation of a pending review."""
    return {
        "id": "rev-001",
        "source": "webhook",
        "type": "jira-tickets",
        "status": "pending",
        "input_content": "We need self-serve onboarding for new customers.",
        "generated_json": direct_content,
        "created_at": "2025-03-01T10:15:00Z",
        "created_by": "n8n",
    }


@pytest.fixture
def make_review(review_data):
    """Factory for ReviewRecord with wire-key overrides."""
    def _make(**overrides) -> ReviewRecord:
        data = copy.deepcopy(review_data)
        data.update(overrides)
        return ReviewRecord.from_dict(data)
    return _make
