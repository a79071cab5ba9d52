"""
Content normalization for generated planning content.

The generator has produced two schemas over time:

  direct:  {"initiative": {...}, "stakeholderContext": {...},
            "totalStories": N, "readyForJira": bool}
  legacy:  {"data": [{"initiative": {...}, "stakeholderContext": {...}}],
            "totalStories": N, "readyForJira": bool}

and the service stores the payload either as JSON text or as an already
decoded object. normalize() accepts all of these and returns one
CanonicalContent, or a ContentError. It never raises.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional, Union

from pmreview.lib.constants import ELLIPSIS, NO_CONTENT_PREVIEW, PREVIEW_MAX_LEN
from pmreview.lib.errors import ContentError, ErrorKind
from pmreview.pm.models import (
    CanonicalContent,
    Epic,
    Initiative,
    ReviewRecord,
    Story,
)

logger = logging.getLogger(__name__)


# Raw content variants, resolved once at the normalizer boundary

@dataclass(frozen=True)
class TextContent:
    """Content stored as serialized JSON text."""
    text: str


@dataclass(frozen=True)
class StructuredContent:
    """Content stored as an already-decoded JSON value."""
    data: Union[dict, list]


RawContent = Union[TextContent, StructuredContent]


class NormalizeResult(NamedTuple):
    """Outcome of normalize(): exactly one of content/error is set."""
    content: Optional[CanonicalContent]
    error: Optional[ContentError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContentStats(NamedTuple):
    initiative_count: int
    epic_count: int
    story_count: int


class SchemaMatch(NamedTuple):
    """Where the initiative was found in a decoded document."""
    schema: str                                # "direct" or "legacy"
    initiative: dict
    stakeholder_context: Any


def as_raw_content(value: Any) -> Optional[RawContent]:
    """Classify a stored value as text or structured. Returns None if neither."""
    if isinstance(value, (TextContent, StructuredContent)):
        return value
    if isinstance(value, str):
        return TextContent(value)
    if isinstance(value, (dict, list)):
        return StructuredContent(value)
    return None


# Schema matchers, tried in order. First match wins.

def _match_direct(doc: dict) -> Optional[SchemaMatch]:
    initiative = doc.get("initiative")
    if isinstance(initiative, dict):
        return SchemaMatch("direct", initiative, doc.get("stakeholderContext"))
    return None


def _match_legacy(doc: dict) -> Optional[SchemaMatch]:
    items = doc.get("data")
    if not isinstance(items, list) or not items:
        return None
    first = items[0]
    if not isinstance(first, dict) or not isinstance(first.get("initiative"), dict):
        return None
    if len(items) > 1:
        logger.warning(f"Legacy content holds {len(items)} initiatives; using the first")
    return SchemaMatch("legacy", first["initiative"], first.get("stakeholderContext"))


SCHEMA_MATCHERS: list[tuple[str, Callable[[dict], Optional[SchemaMatch]]]] = [
    ("direct", _match_direct),
    ("legacy", _match_legacy),
]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _str_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [_text(v) for v in value if v is not None]
    if isinstance(value, str) and value:
        return [value]
    return []


def _parse_story(item: Any) -> Optional[Story]:
    if isinstance(item, dict):
        return Story(
            as_a=_text(item.get("asA")),
            i_want=_text(item.get("iWant")),
            so_that=_text(item.get("soThat")),
            acceptance_criteria=_str_list(item.get("acceptanceCriteria")),
            key=item.get("key") or None,
        )
    if isinstance(item, str):
        # Bare string stories still count toward the total
        return Story(as_a="", i_want=item, so_that="")
    if item is not None:
        logger.warning(f"Skipping story of unexpected type {type(item).__name__}")
    return None


def _parse_epic(item: Any) -> Optional[Epic]:
    if not isinstance(item, dict):
        logger.warning(f"Skipping epic of unexpected type {type(item).__name__}")
        return None
    raw_stories = item.get("stories")
    stories = []
    if isinstance(raw_stories, list):
        for raw in raw_stories:
            story = _parse_story(raw)
            if story is not None:
                stories.append(story)
    return Epic(
        summary=_text(item.get("summary")),
        description=_text(item.get("description")),
        stories=stories,
        key=item.get("key") or None,
    )


def _parse_initiative(data: dict) -> Initiative:
    raw_epics = data.get("epics")
    epics = []
    if isinstance(raw_epics, list):
        for raw in raw_epics:
            epic = _parse_epic(raw)
            if epic is not None:
                epics.append(epic)
    return Initiative(
        summary=_text(data.get("summary")),
        description=_text(data.get("description")),
        stakeholders=_str_list(data.get("stakeholders")),
        epics=epics,
        key=data.get("key") or None,
    )


def _parse_stakeholder_context(value: Any) -> Optional[dict[str, str]]:
    if not isinstance(value, dict) or not value:
        return None
    return {str(name): _text(note) for name, note in value.items()}


def _decode(raw: RawContent) -> tuple[Any, Optional[ContentError]]:
    if isinstance(raw, StructuredContent):
        return raw.data, None
    try:
        return json.loads(raw.text), None
    except json.JSONDecodeError as e:
        return None, ContentError(ErrorKind.INVALID_FORMAT, f"Invalid JSON content: {e}")


def normalize(raw: Any) -> NormalizeResult:
    """Normalize stored content into CanonicalContent.

    Args:
        raw: JSON text, a decoded dict/list, a RawContent, or None

    Returns:
        NormalizeResult with content set on success, error set on failure.
        INVALID_FORMAT when the value is absent or fails to decode,
        NO_INITIATIVE when it decodes but matches neither schema.
    """
    raw_content = as_raw_content(raw)
    if raw_content is None:
        return NormalizeResult(None, ContentError(ErrorKind.INVALID_FORMAT, "Invalid content format"))

    doc, error = _decode(raw_content)
    if error is not None:
        return NormalizeResult(None, error)

    if not isinstance(doc, dict):
        return NormalizeResult(
            None, ContentError(ErrorKind.NO_INITIATIVE, "Content is not a JSON object")
        )

    match = None
    for name, matcher in SCHEMA_MATCHERS:
        match = matcher(doc)
        if match is not None:
            logger.debug(f"Content matched {name} schema")
            break

    if match is None:
        return NormalizeResult(
            None, ContentError(ErrorKind.NO_INITIATIVE, "No initiatives found in content")
        )

    content = CanonicalContent(
        initiative=_parse_initiative(match.initiative),
        stakeholder_context=_parse_stakeholder_context(match.stakeholder_context),
        ready_for_jira=bool(doc.get("readyForJira", False)),
    )

    total = doc.get("totalStories")
    if isinstance(total, int) and not isinstance(total, bool):
        content.total_stories = total
    else:
        content.total_stories = content.story_count

    return NormalizeResult(content)


def encode(content: CanonicalContent) -> str:
    """Serialize canonical content as indented JSON in the direct schema."""
    return json.dumps(content.to_dict(), indent=2, ensure_ascii=False)


def content_stats(content: Optional[CanonicalContent]) -> ContentStats:
    """Count initiatives, epics and stories."""
    if content is None:
        return ContentStats(0, 0, 0)
    return ContentStats(content.initiative_count, content.epic_count, content.story_count)


def _looks_structured(text: str) -> bool:
    return text.lstrip()[:1] in ("{", "[")


def _escape_safe_cut(text: str, limit: int) -> str:
    """Cut text at limit without splitting a trailing backslash escape."""
    cut = text[:limit]
    idx = cut.rfind("\\", max(0, limit - 6))
    if idx == -1:
        return cut

    run_start = idx
    while run_start > 0 and cut[run_start - 1] == "\\":
        run_start -= 1
    if (idx - run_start + 1) % 2 == 0:
        # Last backslash closes an escaped backslash
        return cut

    needed = 6 if text[idx + 1:idx + 2] == "u" else 2
    if idx + needed <= limit:
        return cut
    return cut[:idx]


def truncate(text: str, max_len: int = PREVIEW_MAX_LEN, structured: Optional[bool] = None) -> str:
    """Cut text to max_len characters, appending an ellipsis only if cut.

    structured: treat text as JSON source and avoid splitting escapes.
    Auto-detected from the leading character when None.
    """
    if len(text) <= max_len:
        return text
    if structured is None:
        structured = _looks_structured(text)
    cut = _escape_safe_cut(text, max_len) if structured else text[:max_len]
    return cut + ELLIPSIS


def derive_summary(
    explicit: Optional[str],
    content: Optional[CanonicalContent],
    fallback_text: Optional[str],
    max_len: int = PREVIEW_MAX_LEN,
) -> str:
    """Pick the summary to show for a review.

    Explicit (service-supplied) summary first, then the initiative summary,
    then the fallback text (usually the original input). Summaries are
    decoded strings and are cut exactly; only the fallback text may be
    JSON source needing the escape guard.
    """
    if explicit:
        return truncate(explicit, max_len, structured=False)
    if content is not None and content.initiative is not None and content.initiative.summary:
        return truncate(content.initiative.summary, max_len, structured=False)
    if fallback_text:
        return truncate(fallback_text, max_len)
    return NO_CONTENT_PREVIEW


def active_content(record: ReviewRecord, fallback_to_generated: bool = False) -> NormalizeResult:
    """Normalize the active content of a review.

    Edited content is authoritative when present. If it fails to normalize
    the error is returned, unless fallback_to_generated is set.
    """
    if record.has_edits:
        result = normalize(record.edited_content)
        if result.ok or not fallback_to_generated:
            return result
        logger.warning(
            f"Review {record.id}: edited content unusable ({result.error}), "
            "falling back to generated content"
        )
    return normalize(record.generated_content)


def editor_text(record: ReviewRecord) -> str:
    """JSON text to present for editing the active content."""
    raw = record.edited_content if record.has_edits else record.generated_content
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (dict, list)):
        return json.dumps(raw, indent=2, ensure_ascii=False)
    return ""


def format_json(text: str) -> str:
    """Pretty-print JSON text. Returns the input unchanged if it doesn't decode."""
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except json.JSONDecodeError:
        return text
