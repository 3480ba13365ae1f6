"""Data models for ticket records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class TicketRecord:
    """A ticket file as read from disk."""

    path: Path
    frontmatter: dict[str, Any]
    body: str
    parse_error: str | None = None
    unreadable: bool = False


@dataclass
class TicketSummary:
    """Flattened view of a ticket used for listing, stats and the index."""

    id: str
    title: str
    status: str
    area: str
    epic: str
    path: Path
    created_at: str | None = None
    updated_at: str | None = None
    intent: str | None = None
    issues: list[str] = field(default_factory=list)


@dataclass
class WorkLogEntry:
    """One work_log entry.

    Attributes:
        at: ISO-8601 timestamp.
        actor: Who did the work (e.g. "worker-ai:alice").
        kind: One of the WorkLogKind values.
        summary: One-line description.
        details: Optional touched_files/commands/links/notes lists.
    """

    at: str
    actor: str
    kind: str
    summary: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Frontmatter representation, omitting empty details."""
        data = asdict(self)
        if data["details"] is None:
            del data["details"]
        return data
