"""TicketAggregator - read-only views derived from the full store."""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import TYPE_CHECKING

from ticketmcp.engine.index import render_index
from ticketmcp.engine.models import (
    NextTicketId,
    TicketDetail,
    TicketFilters,
    TicketStats,
    ValidationReport,
)
from ticketmcp.tickets.exceptions import TicketNotFoundError, TicketReadError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from ticketmcp.engine.models import TicketRef
    from ticketmcp.tickets.models import TicketSummary
    from ticketmcp.tickets.store import TicketStore

logger = logging.getLogger(__name__)

_TRAILING_NUMBER_RE = re.compile(r"(\d+)(?!.*\d)")


def extract_ticket_number(ticket_id: str) -> int | None:
    """Last run of digits in a ticket id ("T-BASE-042" -> 42)."""
    match = _TRAILING_NUMBER_RE.search(ticket_id)
    if match is None:
        return None
    return int(match.group(1))


def highest_ticket_number(ticket_ids: Iterable[str]) -> int:
    """Largest ticket number among ids, 0 when none carry a number."""
    numbers = [n for n in (extract_ticket_number(i) for i in ticket_ids) if n is not None]
    return max(numbers, default=0)


def format_ticket_id(number: int, prefix: str = "T", separator: str = "-", padding: int = 3) -> str:
    """Build an id such as T-007; padding <= 0 disables zero padding."""
    numeric = str(number).zfill(padding) if padding > 0 else str(number)
    return f"{prefix}{separator}{numeric}" if prefix else numeric


def matches_filters(summary: TicketSummary, filters: TicketFilters) -> bool:
    """True if summary passes every active filter."""
    if filters.status and summary.status not in filters.status:
        return False
    if filters.area and summary.area not in filters.area:
        return False
    if filters.epic and summary.epic not in filters.epic:
        return False
    if filters.text:
        haystack = f"{summary.id} {summary.title} {summary.intent or ''}".lower()
        if filters.text.lower() not in haystack:
            return False
    return True


def sort_by_updated(summaries: Iterable[TicketSummary]) -> list[TicketSummary]:
    """Most recently updated first; ISO strings compare chronologically."""
    return sorted(summaries, key=lambda s: str(s.updated_at or ""), reverse=True)


class TicketAggregator:
    """Listing, lookup, validation and statistics over the ticket store."""

    def __init__(self, store: TicketStore) -> None:
        self.store = store

    def list_tickets(self, filters: TicketFilters | None = None) -> list[TicketSummary]:
        """List tickets matching filters, newest update first."""
        filters = filters or TicketFilters()
        summaries = [s for s in self.store.summaries() if matches_filters(s, filters)]
        return sort_by_updated(summaries)

    def get_ticket(self, ref: TicketRef) -> TicketDetail:
        """Full ticket with its validation issues.

        Raises:
            TicketNotFoundError: If ref does not resolve.
            TicketReadError: If the file vanished before it could be read.
        """
        path = self.store.resolve(id=ref.id, path=ref.path)
        if path is None:
            raise TicketNotFoundError()
        record = self.store.read(path)
        if record is None:
            raise TicketReadError()
        return TicketDetail(
            path=record.path,
            frontmatter=record.frontmatter,
            body=record.body,
            issues=self.store.validate(record),
            parse_error=record.parse_error,
        )

    def validate_one(self, path: Path) -> ValidationReport:
        """Validate a single ticket file."""
        record = self.store.read(path)
        if record is None:
            return ValidationReport(path=path, issues=["Failed to read ticket"])
        return ValidationReport(path=path, issues=self.store.validate(record))

    def validate_all(self) -> list[ValidationReport]:
        """Reports for every ticket that has at least one issue."""
        reports = (self.validate_one(path) for path in self.store.list_files())
        return [report for report in reports if report.issues]

    def stats(self) -> TicketStats:
        """Counts per status/area/epic and the highest/next ticket numbers."""
        summaries = self.store.summaries()
        highest = highest_ticket_number(s.id for s in summaries)
        return TicketStats(
            status=dict(Counter(s.status or "unknown" for s in summaries)),
            area=dict(Counter(s.area or "unknown" for s in summaries)),
            epic=dict(Counter(s.epic or "unassigned" for s in summaries)),
            highest_ticket_number=highest,
            next_ticket_number=highest + 1,
        )

    def next_id(self, prefix: str = "T", separator: str = "-", padding: int = 3) -> NextTicketId:
        """Suggest the id following the highest ticket number in the store."""
        highest = highest_ticket_number(s.id for s in self.store.summaries())
        return NextTicketId(
            highest_ticket_number=highest,
            next_ticket_number=highest + 1,
            suggested_id=format_ticket_id(highest + 1, prefix, separator, padding),
        )

    def regenerate_index(self) -> Path:
        """Rewrite tickets/INDEX.md from the current store contents."""
        index_path = self.store.index_path
        content = render_index(self.store.summaries())
        index_path.parent.mkdir(parents=True, exist_ok=True)
        index_path.write_text(content, encoding="utf-8")
        logger.debug("Regenerated %s", index_path)
        return index_path
