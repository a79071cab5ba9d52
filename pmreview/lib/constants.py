"""Shared constants for pmreview."""

# Preview truncation
PREVIEW_MAX_LEN = 150
ELLIPSIS = "..."
NO_CONTENT_PREVIEW = "No content available"

# Collaborator service
DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Review provenance and content types (display-only, preserved verbatim)
SOURCE_WEBHOOK = "webhook"
SOURCE_MANUAL = "manual"
VALID_SOURCES = {SOURCE_WEBHOOK, SOURCE_MANUAL}

VALID_CONTENT_TYPES = {"jira-tickets", "prd", "message", "strategy-doc"}
