"""
Text projections of reviews for list and detail display.

All functions are pure: they read a ReviewRecord (or canonical content)
and return strings. Server-supplied preview stats win over recomputation.
"""

from datetime import datetime
from typing import Optional

from pmreview.lib.constants import PREVIEW_MAX_LEN, SOURCE_MANUAL, SOURCE_WEBHOOK
from pmreview.pm.content import active_content, derive_summary
from pmreview.pm.models import CanonicalContent, ReviewRecord
from pmreview.workflow.state_machine import StepState, derive_steps

STEP_MARKERS = {
    StepState.COMPLETED: "[x]",
    StepState.ACTIVE: "[>]",
    StepState.PENDING: "[ ]",
}

SOURCE_LABELS = {
    SOURCE_WEBHOOK: "n8n Pipeline",
    SOURCE_MANUAL: "Manual",
}


def preview_text(record: ReviewRecord, max_len: int = PREVIEW_MAX_LEN) -> str:
    """Short summary for list rows.

    Order: server preview summary, initiative summary from the active
    content, the original input. Content that fails to normalize falls
    through to the input.
    """
    explicit = record.preview_stats.summary if record.preview_stats else None
    content = None
    if not explicit:
        content = active_content(record).content
    return derive_summary(explicit, content, record.input_content, max_len)


def stats_text(record: ReviewRecord) -> str:
    """Counts line for list rows, or "" if content can't be read."""
    stats = record.preview_stats
    if stats is not None:
        return f"{stats.initiative_count} initiatives, {stats.epic_count} epics, {stats.story_count} stories"

    content = active_content(record).content
    if content is None or content.initiative is None:
        return ""
    return f"1 initiative, {content.epic_count} epics, {content.story_count} stories"


def source_label(source: str) -> str:
    return SOURCE_LABELS.get(source, source or "unknown")


def format_steps(status: Optional[str]) -> str:
    """One line per workflow step with a progress marker."""
    lines = []
    for step in derive_steps(status):
        lines.append(f"{STEP_MARKERS[step.state]} {step.title} - {step.description}")
    return "\n".join(lines)


def format_content(content: CanonicalContent) -> str:
    """Render canonical content as readable text."""
    lines = []
    initiative = content.initiative
    if initiative is None:
        return "No initiatives found in content"

    lines.append(f"Initiative: {initiative.summary}")
    if initiative.description:
        lines.append(f"  {initiative.description}")
    if initiative.stakeholders:
        lines.append(f"  Stakeholders: {', '.join(initiative.stakeholders)}")

    for epic in initiative.epics:
        lines.append("")
        lines.append(f"  Epic: {epic.summary}")
        if epic.description:
            lines.append(f"    {epic.description}")
        for i, story in enumerate(epic.stories, 1):
            lines.append(f"    Story {i}")
            lines.append(f"      As a:    {story.as_a}")
            lines.append(f"      I want:  {story.i_want}")
            lines.append(f"      So that: {story.so_that}")
            if story.acceptance_criteria:
                lines.append("      Acceptance Criteria:")
                for criterion in story.acceptance_criteria:
                    lines.append(f"        - {criterion}")

    if content.stakeholder_context:
        lines.append("")
        lines.append("Stakeholder Context:")
        for name, note in content.stakeholder_context.items():
            lines.append(f"  {name}: {note}")

    readiness = "Ready for Jira" if content.ready_for_jira else "Needs Review"
    lines.append("")
    lines.append(f"Total Stories: {content.total_stories}  Status: {readiness}")
    return "\n".join(lines)


def format_timestamp(value: Optional[str]) -> str:
    """Render an ISO timestamp as 'YYYY-MM-DD HH:MM'. Unparseable values pass through."""
    if not value:
        return ""
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return ts.strftime("%Y-%m-%d %H:%M")
