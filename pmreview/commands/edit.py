"""
pmr edit - Save edited JSON content for a review.

Reads the new content from --file, or opens $EDITOR on the current
content.
"""

import asyncio
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.pm.content import editor_text, format_json
from pmreview.workflow.actions import ReviewActions

DEFAULT_EDITOR = "vi"


def edit_in_editor(initial: str) -> str | None:
    """Open $EDITOR on initial text and return the result.

    Returns None if the editor exits non-zero.
    """
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR
    with tempfile.TemporaryDirectory(prefix="pmr-edit-") as tmp:
        path = Path(tmp) / "review.json"
        path.write_text(initial)
        result = subprocess.run(shlex.split(editor) + [str(path)])
        if result.returncode != 0:
            return None
        return path.read_text()


async def _edit(args, config: ApiConfig) -> int:
    async with ReviewApiClient(config) as client:
        result = await client.get_review(args.id)
        if not result.success:
            print(f"ERROR: {result.error}")
            return 1
        review = result.data

        current = format_json(editor_text(review))
        file_arg = getattr(args, "file", None)
        if file_arg:
            path = Path(file_arg)
            if not path.exists():
                print(f"ERROR: File not found: {path}")
                return 2
            text = path.read_text()
        else:
            text = edit_in_editor(current)
            if text is None:
                print("Editor exited with an error; nothing saved.")
                return 1

        if text.strip() == current.strip():
            print("No changes.")
            return 0

        outcome = await ReviewActions(client).save_edit(review, text)

    if not outcome.ok:
        print(f"ERROR: {outcome.error}")
        return 1

    print(f"Saved edits to review '{review.id}'")
    return 0


def cmd_edit(args, config: ApiConfig) -> int:
    """Edit a review's content."""
    return asyncio.run(_edit(args, config))
