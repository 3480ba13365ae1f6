"""Schema and folder/status invariant checks for ticket records."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ticketmcp.tickets.layout import status_folder
from ticketmcp.tickets.schema import (
    FOLDER_TO_STATUS,
    LIST_FIELDS,
    REQUIRED_BODY_HEADERS,
    REQUIRED_FIELDS,
    WORK_LOG_KIND_VALUES,
    format_invalid_status,
    is_valid_status,
)
from ticketmcp.tickets.timestamps import is_valid_date

_TIMESTAMP_FIELDS = ("created_at", "updated_at", "claimed_at")
_WORK_LOG_REQUIRED = ("at", "actor", "kind", "summary")


def validate_ticket(
    frontmatter: Mapping[str, Any],
    body: str,
    path: Path,
    tickets_root: Path,
) -> list[str]:
    """Validate a ticket record against the schema and its on-disk location.

    Every check runs; the result lists all issues found, empty when valid.

    Args:
        frontmatter: Decoded frontmatter mapping.
        body: Markdown body.
        path: Absolute path the record lives at (or would be written to).
        tickets_root: Root of the status folders.

    Returns:
        Human-readable issue strings.
    """
    issues: list[str] = []

    for key in REQUIRED_FIELDS:
        if key not in frontmatter:
            issues.append(f"Missing required field: {key}")

    for header in REQUIRED_BODY_HEADERS:
        if header not in body:
            issues.append(f"Missing required markdown section: {header}")

    status = frontmatter.get("status")
    if status and not is_valid_status(status):
        issues.append(format_invalid_status(status))

    work_log = frontmatter.get("work_log")
    if work_log:
        issues.extend(validate_work_log(work_log))

    folder_issue = validate_folder_status(status, path, tickets_root)
    if folder_issue:
        issues.append(folder_issue)

    for key in _TIMESTAMP_FIELDS:
        value = frontmatter.get(key)
        if value and not is_valid_date(value):
            issues.append(f"Invalid {key} timestamp")

    for key in LIST_FIELDS:
        value = frontmatter.get(key)
        if value and not isinstance(value, list):
            issues.append(f"{key} must be a list")

    epic = frontmatter.get("epic")
    if epic is not None and not isinstance(epic, str):
        issues.append("epic must be a string when provided")

    for key in ("claimed_by", "review_notes"):
        value = frontmatter.get(key)
        if value is not None and not isinstance(value, str):
            issues.append(f"{key} must be string or null")

    return issues


def validate_work_log(work_log: Any) -> list[str]:
    """Check each work_log entry for required keys and a known kind."""
    if not isinstance(work_log, list):
        return ["work_log must be a list"]

    issues: list[str] = []
    for entry in work_log:
        if not isinstance(entry, Mapping):
            issues.append("work_log entries must be objects")
            continue
        for key in _WORK_LOG_REQUIRED:
            if not entry.get(key):
                issues.append(f"work_log entry missing {key}")
        kind = entry.get("kind")
        if kind and kind not in WORK_LOG_KIND_VALUES:
            issues.append(
                f"Invalid work_log kind: {kind}. Allowed: {', '.join(WORK_LOG_KIND_VALUES)}"
            )
    return issues


def validate_folder_status(status: Any, path: Path, tickets_root: Path) -> str | None:
    """Folder/status mismatch message, or None when consistent or not applicable."""
    if not status:
        return None
    folder = status_folder(path, tickets_root)
    if folder is None:
        return None
    if status not in FOLDER_TO_STATUS[folder]:
        return f"Folder/status mismatch: {folder} vs {status}"
    return None
