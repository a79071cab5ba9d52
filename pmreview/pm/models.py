"""
Data models for reviews and planning content.

ReviewRecord mirrors the collaborator service's review row. The canonical
planning content (Initiative > Epic > Story) is what the normalizer produces
from either generated or edited JSON.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from pmreview.lib.constants import VALID_CONTENT_TYPES, VALID_SOURCES

logger = logging.getLogger(__name__)


@dataclass
class Story:
    """A user story inside an epic."""
    as_a: str
    i_want: str
    so_that: str
    acceptance_criteria: list[str] = field(default_factory=list)
    key: Optional[str] = None                  # Ticket key once created

    def to_dict(self) -> dict:
        data = {
            "asA": self.as_a,
            "iWant": self.i_want,
            "soThat": self.so_that,
            "acceptanceCriteria": list(self.acceptance_criteria),
        }
        if self.key:
            data["key"] = self.key
        return data


@dataclass
class Epic:
    """A group of stories under an initiative."""
    summary: str
    description: str
    stories: list[Story] = field(default_factory=list)
    key: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "summary": self.summary,
            "description": self.description,
            "stories": [s.to_dict() for s in self.stories],
        }
        if self.key:
            data["key"] = self.key
        return data


@dataclass
class Initiative:
    """Top of the planning hierarchy."""
    summary: str
    description: str
    stakeholders: list[str] = field(default_factory=list)
    epics: list[Epic] = field(default_factory=list)
    key: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "summary": self.summary,
            "description": self.description,
            "stakeholders": list(self.stakeholders),
            "epics": [e.to_dict() for e in self.epics],
        }
        if self.key:
            data["key"] = self.key
        return data


@dataclass
class CanonicalContent:
    """Normalized planning content, independent of the source schema."""
    initiative: Optional[Initiative]
    stakeholder_context: Optional[dict[str, str]] = None
    total_stories: int = 0
    ready_for_jira: bool = False

    @property
    def initiative_count(self) -> int:
        return 1 if self.initiative is not None else 0

    @property
    def epic_count(self) -> int:
        if self.initiative is None:
            return 0
        return len(self.initiative.epics)

    @property
    def story_count(self) -> int:
        if self.initiative is None:
            return 0
        return sum(len(epic.stories) for epic in self.initiative.epics)

    def to_dict(self) -> dict:
        """Serialize using the direct (current) schema."""
        data: dict[str, Any] = {}
        if self.initiative is not None:
            data["initiative"] = self.initiative.to_dict()
        if self.stakeholder_context:
            data["stakeholderContext"] = dict(self.stakeholder_context)
        data["totalStories"] = self.total_stories
        data["readyForJira"] = self.ready_for_jira
        return data


@dataclass(frozen=True)
class PreviewStats:
    """Server-computed summary attached to list responses."""
    summary: Optional[str] = None
    initiative_count: int = 0
    epic_count: int = 0
    story_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PreviewStats":
        return cls(
            summary=data.get("summary") or None,
            initiative_count=int(data.get("initiative_count") or 0),
            epic_count=int(data.get("epic_count") or 0),
            story_count=int(data.get("story_count") or 0),
        )

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "initiative_count": self.initiative_count,
            "epic_count": self.epic_count,
            "story_count": self.story_count,
        }
        if self.summary is not None:
            data["summary"] = self.summary
        return data


def parse_ticket_references(value: Any) -> list[str]:
    """Parse jira_tickets from the wire.

    The service has sent a JSON array, a JSON-encoded array string, and a
    plain comma separated string over time.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    if not isinstance(value, str):
        return [str(value)]

    text = value.strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return parse_ticket_references(decoded)
    return [part.strip() for part in text.split(",") if part.strip()]


@dataclass(frozen=True)
class ReviewRecord:
    """A review as persisted by the collaborator service.

    generated_content and edited_content hold the raw stored value: either
    JSON text or an already-decoded mapping. Use pmreview.pm.content to get
    canonical content out of them.
    """
    id: str
    source: str                                # webhook, manual
    content_type: str                          # jira-tickets, prd, message, strategy-doc
    status: str                                # pending, approved, rejected, created
    input_content: str
    created_at: str                            # ISO timestamp
    generated_content: Any = None
    edited_content: Any = None
    ticket_references: tuple[str, ...] = ()
    reviewed_at: Optional[str] = None
    preview_stats: Optional[PreviewStats] = None
    created_by: Optional[str] = None
    context_used: Optional[str] = None
    additional_context: Optional[str] = None
    output_location: Optional[str] = None

    @property
    def has_edits(self) -> bool:
        return self.edited_content is not None and self.edited_content != ""

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewRecord":
        """Build a record from the service's wire representation."""
        source = data.get("source", "")
        if source and source not in VALID_SOURCES:
            logger.debug(f"Review {data.get('id')}: unrecognized source '{source}'")
        content_type = data.get("type", "")
        if content_type and content_type not in VALID_CONTENT_TYPES:
            logger.debug(f"Review {data.get('id')}: unrecognized type '{content_type}'")

        preview = data.get("preview")
        return cls(
            id=str(data["id"]),
            source=source,
            content_type=content_type,
            status=data.get("status", ""),
            input_content=data.get("input_content") or "",
            created_at=data.get("created_at") or "",
            generated_content=data.get("generated_json"),
            edited_content=data.get("edited_json"),
            ticket_references=tuple(parse_ticket_references(data.get("jira_tickets"))),
            reviewed_at=data.get("reviewed_at"),
            preview_stats=PreviewStats.from_dict(preview) if isinstance(preview, dict) else None,
            created_by=data.get("created_by"),
            context_used=data.get("context_used"),
            additional_context=data.get("additional_context"),
            output_location=data.get("output_location"),
        )

    def to_dict(self) -> dict:
        """Serialize back to wire keys. Raw content is passed through untouched."""
        data: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "type": self.content_type,
            "status": self.status,
            "input_content": self.input_content,
            "generated_json": self.generated_content,
            "created_at": self.created_at,
        }
        optional = {
            "edited_json": self.edited_content,
            "reviewed_at": self.reviewed_at,
            "created_by": self.created_by,
            "context_used": self.context_used,
            "additional_context": self.additional_context,
            "output_location": self.output_location,
        }
        for key, value in optional.items():
            if value is not None:
                data[key] = value
        if self.ticket_references:
            data["jira_tickets"] = list(self.ticket_references)
        if self.preview_stats is not None:
            data["preview"] = self.preview_stats.to_dict()
        return data
