"""Ticket schema: status/kind enums, folder mapping, required fields and headings."""

from __future__ import annotations

from enum import StrEnum


class TicketStatus(StrEnum):
    """Ticket status enum."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    AWAITING_HUMAN_TEST = "awaiting_human_test"
    DONE = "done"
    ARCHIVED = "archived"


class WorkLogKind(StrEnum):
    """Kinds of work_log entries."""

    CLAIM = "claim"
    ANALYSIS = "analysis"
    CHANGE = "change"
    COMMAND = "command"
    HANDOFF = "handoff"
    BLOCKER = "blocker"
    NOTE = "note"


STATUS_VALUES: tuple[str, ...] = tuple(s.value for s in TicketStatus)
WORK_LOG_KIND_VALUES: tuple[str, ...] = tuple(k.value for k in WorkLogKind)

TICKETS_DIR = "tickets"
INDEX_FILE = "INDEX.md"

STATUS_TO_FOLDER: dict[str, str] = {
    TicketStatus.PENDING: "pending",
    TicketStatus.IN_PROGRESS: "in_progress",
    TicketStatus.BLOCKED: "in_progress",
    TicketStatus.AWAITING_HUMAN_TEST: "awaiting_human_test",
    TicketStatus.DONE: "done",
    TicketStatus.ARCHIVED: "archive",
}

# Insertion order is the scan order for the store.
FOLDER_TO_STATUS: dict[str, tuple[str, ...]] = {
    "pending": (TicketStatus.PENDING,),
    "in_progress": (TicketStatus.IN_PROGRESS, TicketStatus.BLOCKED),
    "awaiting_human_test": (TicketStatus.AWAITING_HUMAN_TEST,),
    "done": (TicketStatus.DONE,),
    "archive": (TicketStatus.ARCHIVED,),
}

STATUS_FOLDERS: tuple[str, ...] = tuple(FOLDER_TO_STATUS)

# Canonical frontmatter key order; every key is also required.
FRONTMATTER_KEYS: tuple[str, ...] = (
    "id",
    "title",
    "status",
    "created_at",
    "updated_at",
    "area",
    "epic",
    "key_files",
    "intent",
    "requirements",
    "human_testing_steps",
    "constraints",
    "depends_on",
    "claimed_by",
    "claimed_at",
    "work_log",
    "review_notes",
)

REQUIRED_FIELDS = FRONTMATTER_KEYS

LIST_FIELDS: tuple[str, ...] = (
    "key_files",
    "requirements",
    "human_testing_steps",
    "constraints",
    "depends_on",
)

REQUIRED_BODY_HEADERS: tuple[str, ...] = (
    "## Overview",
    "## Approach (medium/high-level)",
    "## Tasks / Todos",
    "## Requirements (AI implementation)",
    "## Human Testing Steps",
    "## Key Files / Areas (notes)",
    "## Questions",
    "## Blockers",
    "## Implementation Notes",
)


def is_valid_status(value: object) -> bool:
    """Return True if value is one of the ticket statuses."""
    return isinstance(value, str) and value in STATUS_VALUES


def suggest_status(value: str) -> str | None:
    """Suggest the closest valid status for a possibly misspelled value.

    Matches exactly or by prefix in either direction ("prog" does not match,
    "in_prog" and "done_now" do). Returns None when nothing matches.
    """
    normalized = value.strip().lower()
    if not normalized:
        return None
    for status in STATUS_VALUES:
        if status == normalized:
            return status
        if status.startswith(normalized) or normalized.startswith(status):
            return status
    return None


def format_invalid_status(value: object) -> str:
    """Build the error message for an invalid status, with a suggestion if any."""
    raw = "None" if value is None else str(value)
    suggestion = suggest_status(raw)
    valid = f"Valid statuses: {', '.join(STATUS_VALUES)}"
    if suggestion and suggestion != raw:
        return f"Invalid status: {raw}. Did you mean {suggestion}? {valid}"
    return f"Invalid status: {raw}. {valid}"


def default_body(title: str) -> str:
    """Body template containing every required section heading."""
    headers = "\n\n".join(REQUIRED_BODY_HEADERS)
    return f"# {title}\n\n{headers}\n"
