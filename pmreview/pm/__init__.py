"""
Planning content module for pmreview.

Holds the review and Initiative > Epic > Story models, and the normalizer
that reconciles the generator's content schemas into canonical content.
"""

from pmreview.pm.models import (
    CanonicalContent,
    Epic,
    Initiative,
    PreviewStats,
    ReviewRecord,
    Story,
)
from pmreview.pm.content import (
    NormalizeResult,
    active_content,
    content_stats,
    derive_summary,
    editor_text,
    encode,
    normalize,
    truncate,
)

__all__ = [
    "CanonicalContent",
    "Epic",
    "Initiative",
    "PreviewStats",
    "ReviewRecord",
    "Story",
    "NormalizeResult",
    "active_content",
    "content_stats",
    "derive_summary",
    "editor_text",
    "encode",
    "normalize",
    "truncate",
]
