"""Data models for engine requests and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class TicketRef:
    """Reference to a ticket by path (preferred) or id."""

    id: str | None = None
    path: str | None = None


@dataclass
class NewTicket:
    """Arguments for creating a ticket."""

    id: str
    title: str
    area: str
    intent: str
    requirements: list[str]
    human_testing_steps: list[str]
    constraints: list[str]
    key_files: list[str]
    epic: str | None = None
    depends_on: list[str] = field(default_factory=list)
    status: str | None = None
    created_at: str | None = None
    body: str | None = None
    filename: str | None = None


@dataclass
class MutationResult:
    """Outcome of a successful write."""

    path: Path
    issues: list[str] = field(default_factory=list)


@dataclass
class TicketDetail:
    """Full ticket returned by get."""

    path: Path
    frontmatter: dict[str, Any]
    body: str
    issues: list[str]
    parse_error: str | None = None


@dataclass
class ValidationReport:
    """Issues found for one ticket file."""

    path: Path
    issues: list[str]


@dataclass
class TicketFilters:
    """Filters for listing; empty sets and None mean no filter."""

    status: set[str] = field(default_factory=set)
    area: set[str] = field(default_factory=set)
    epic: set[str] = field(default_factory=set)
    text: str | None = None


@dataclass
class TicketStats:
    """Counts per status/area/epic and the ticket number range."""

    status: dict[str, int]
    area: dict[str, int]
    epic: dict[str, int]
    highest_ticket_number: int
    next_ticket_number: int


@dataclass
class NextTicketId:
    """Next ticket number and a suggested id."""

    highest_ticket_number: int
    next_ticket_number: int
    suggested_id: str


@dataclass
class ReconcileReport:
    """What reconcile found and fixed for one ticket."""

    path: Path
    changed: bool
    fixes_applied: list[str]
    before_issues: list[str]
    after_issues: list[str]
    unresolved_issues: list[str]


@dataclass
class ReconcileResult:
    """Aggregate reconcile outcome."""

    apply_fixes: bool
    scanned: int
    changed: int
    unresolved: int
    reports: list[ReconcileReport]
