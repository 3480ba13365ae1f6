"""TicketEngine - guarded ticket mutations."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ticketmcp.engine.aggregation import TicketAggregator
from ticketmcp.engine.exceptions import (
    ClaimError,
    DestinationError,
    InvalidTicketError,
    ValidationFailedError,
)
from ticketmcp.engine.index import IndexRefresher
from ticketmcp.engine.models import MutationResult, ReconcileResult
from ticketmcp.engine.reconcile import reconcile_path
from ticketmcp.tickets.exceptions import (
    TicketExistsError,
    TicketNotFoundError,
    TicketParseError,
    TicketReadError,
)
from ticketmcp.tickets.models import WorkLogEntry
from ticketmcp.tickets.schema import (
    STATUS_TO_FOLDER,
    TicketStatus,
    WorkLogKind,
    default_body,
    format_invalid_status,
    is_valid_status,
)
from ticketmcp.tickets.store import TicketStore, normalize_frontmatter
from ticketmcp.tickets.timestamps import date_prefix, utc_now_iso
from ticketmcp.tickets.validator import validate_ticket

if TYPE_CHECKING:
    from pathlib import Path

    from ticketmcp.config import TicketConfig
    from ticketmcp.engine.models import NewTicket, TicketRef
    from ticketmcp.tickets.models import TicketRecord

logger = logging.getLogger(__name__)

DEFAULT_CLAIM_SUMMARY = "Claimed ticket for implementation"


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumerics to '-', trim dashes, cap at 80 chars."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:80]


def default_filename(created_at: str, ticket_id: str, title: str) -> str:
    """{date}__{id}__{slug}.md"""
    return f"{date_prefix(created_at)}__{ticket_id}__{slugify(title)}.md"


def normalize_string_list(value: Any) -> list[str]:
    """Coerce a scalar or list into a list of non-empty strings."""
    if not value:
        return []
    items = value if isinstance(value, list) else [value]
    return [str(item) for item in items if item not in (None, "")]


def append_work_log(work_log: Any, entry: Mapping[str, Any]) -> list[Any]:
    """New list with entry appended; a non-list work_log starts over."""
    entries = list(work_log) if isinstance(work_log, list) else []
    entries.append(dict(entry))
    return entries


class TicketEngine:
    """Create, patch, move, claim, log and reconcile tickets.

    Every write is validated first. In strict mode any issue aborts the
    write with ValidationFailedError and leaves the file untouched. After
    a successful write the index is refreshed in the background.
    """

    def __init__(self, config: TicketConfig, store: TicketStore | None = None) -> None:
        """Initialize the engine.

        Args:
            config: Root directory and strict-mode flag.
            store: Store to use; built from config.repo_root when omitted.
        """
        self.config = config
        self.store = store if store is not None else TicketStore(config.repo_root)
        self.aggregator = TicketAggregator(self.store)
        self.index = IndexRefresher(self.aggregator.regenerate_index)

    @property
    def strict(self) -> bool:
        return self.config.strict

    # --- Helpers ---

    def _resolve(self, ref: TicketRef) -> Path:
        path = self.store.resolve(id=ref.id, path=ref.path)
        if path is None:
            raise TicketNotFoundError()
        return path

    def _load_mutable(self, path: Path) -> TicketRecord:
        """Read a record that is about to be rewritten."""
        record = self.store.read(path)
        if record is None:
            raise TicketReadError()
        if record.unreadable:
            raise TicketReadError(record.parse_error or "Failed to read ticket")
        if record.parse_error:
            raise TicketParseError(record.parse_error)
        return record

    def _check(self, frontmatter: dict[str, Any], body: str, path: Path) -> list[str]:
        """Validate a candidate state; raise in strict mode if it has issues."""
        issues = validate_ticket(frontmatter, body, path, self.store.tickets_root)
        if self.strict and issues:
            logger.warning("Rejected write to %s: %d issue(s)", path, len(issues))
            raise ValidationFailedError(issues)
        return issues

    def _relocate(
        self, source: Path, destination: Path, frontmatter: dict[str, Any], body: str
    ) -> None:
        """Write to destination, then drop source if it differs."""
        self.store.write(destination, frontmatter, body)
        if destination != source:
            self.store.delete(source)

    def _destination(self, path: Path, status: str) -> Path:
        """Target path for status; refuses to replace another ticket file."""
        destination = self.store.path_for_status(path, status)
        if destination is None:
            raise DestinationError()
        if destination != path and destination.exists():
            raise TicketExistsError(f"Ticket file already exists: {destination}")
        return destination

    def _written(self) -> None:
        self.index.schedule()

    # --- Operations ---

    def create(self, ticket: NewTicket) -> MutationResult:
        """Create a new ticket file in the folder for its status.

        Raises:
            InvalidTicketError: Missing id/fields, empty lists or bad status.
            TicketExistsError: Duplicate id or existing target file.
            ValidationFailedError: Strict mode and the new ticket has issues.
        """
        ticket_id = (ticket.id or "").strip()
        if not ticket_id:
            raise InvalidTicketError("Missing id")
        if self.store.find_by_id(ticket_id) is not None:
            raise TicketExistsError(f"Ticket id already exists: {ticket_id}")

        title = (ticket.title or "").strip()
        area = (ticket.area or "").strip()
        intent = (ticket.intent or "").strip()
        epic = (ticket.epic or "").strip() or "none"

        requirements = normalize_string_list(ticket.requirements)
        human_testing_steps = normalize_string_list(ticket.human_testing_steps)
        constraints = normalize_string_list(ticket.constraints)
        key_files = normalize_string_list(ticket.key_files)
        depends_on = normalize_string_list(ticket.depends_on)

        if not title or not area or not intent:
            raise InvalidTicketError("Missing required fields")
        if not requirements or not human_testing_steps or not constraints:
            raise InvalidTicketError(
                "requirements, human_testing_steps, constraints must be non-empty"
            )
        if not key_files:
            raise InvalidTicketError("key_files must be non-empty")

        status = ticket.status or TicketStatus.PENDING.value
        if not is_valid_status(status):
            raise InvalidTicketError(format_invalid_status(status))

        created_at = ticket.created_at or utc_now_iso()
        frontmatter: dict[str, Any] = {
            "id": ticket_id,
            "title": title,
            "status": str(status),
            "created_at": created_at,
            "updated_at": created_at,
            "area": area,
            "epic": epic,
            "key_files": key_files,
            "intent": intent,
            "requirements": requirements,
            "human_testing_steps": human_testing_steps,
            "constraints": constraints,
            "depends_on": depends_on,
            "claimed_by": None,
            "claimed_at": None,
            "work_log": [],
            "review_notes": None,
        }

        body = ticket.body if ticket.body and ticket.body.strip() else default_body(title)
        filename = (ticket.filename or "").strip() or default_filename(
            created_at, ticket_id, title
        )

        path = self.store.folder_path(STATUS_TO_FOLDER[status]) / filename
        if path.exists():
            raise TicketExistsError(f"Ticket file already exists: {path}")

        issues = self._check(frontmatter, body, path)
        self.store.write(path, frontmatter, body)
        logger.info("Created ticket %s at %s", ticket_id, path)
        self._written()
        return MutationResult(path=path, issues=issues)

    def update(
        self,
        ref: TicketRef,
        patch: Mapping[str, Any],
        work_log_entry: Mapping[str, Any] | None = None,
    ) -> MutationResult:
        """Shallow-merge patch into the frontmatter and rewrite in place."""
        path = self._resolve(ref)
        record = self._load_mutable(path)

        frontmatter = normalize_frontmatter({**record.frontmatter, **patch})
        frontmatter["updated_at"] = utc_now_iso()
        if work_log_entry:
            frontmatter["work_log"] = append_work_log(frontmatter.get("work_log"), work_log_entry)

        issues = self._check(frontmatter, record.body, path)
        self.store.write(path, frontmatter, record.body)
        logger.info("Updated ticket %s (%s)", path, ", ".join(sorted(patch)) or "no fields")
        self._written()
        return MutationResult(path=path, issues=issues)

    def move(
        self,
        ref: TicketRef,
        to_status: str,
        work_log_entry: Mapping[str, Any] | None = None,
    ) -> MutationResult:
        """Set status and relocate the file to the matching folder."""
        path = self._resolve(ref)
        if not is_valid_status(to_status):
            raise InvalidTicketError(format_invalid_status(to_status))
        record = self._load_mutable(path)

        frontmatter = dict(record.frontmatter)
        frontmatter["status"] = str(to_status)
        frontmatter["updated_at"] = utc_now_iso()
        if work_log_entry:
            frontmatter["work_log"] = append_work_log(frontmatter.get("work_log"), work_log_entry)

        destination = self._destination(path, to_status)
        issues = self._check(frontmatter, record.body, destination)
        self._relocate(path, destination, frontmatter, record.body)
        logger.info("Moved ticket %s to %s", destination, to_status)
        self._written()
        return MutationResult(path=destination, issues=issues)

    def claim(
        self,
        ref: TicketRef,
        actor: str,
        summary: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> MutationResult:
        """Claim a pending ticket for actor and move it to in_progress.

        Raises:
            InvalidTicketError: Empty actor.
            ClaimError: Ticket is not pending.
        """
        path = self._resolve(ref)
        actor = (actor or "").strip()
        if not actor:
            raise InvalidTicketError("Missing actor")
        record = self._load_mutable(path)

        current = record.frontmatter.get("status")
        if current != TicketStatus.PENDING:
            raise ClaimError(
                "Ticket must be pending to claim "
                f"(current status: {current if current is not None else 'unknown'})"
            )

        now = utc_now_iso()
        entry = WorkLogEntry(
            at=now,
            actor=actor,
            kind=WorkLogKind.CLAIM.value,
            summary=(summary or "").strip() or DEFAULT_CLAIM_SUMMARY,
            details=dict(details) if details else None,
        )
        frontmatter = dict(record.frontmatter)
        frontmatter["status"] = TicketStatus.IN_PROGRESS.value
        frontmatter["claimed_by"] = actor
        frontmatter["claimed_at"] = now
        frontmatter["updated_at"] = now
        frontmatter["work_log"] = append_work_log(frontmatter.get("work_log"), entry.to_dict())

        destination = self._destination(path, TicketStatus.IN_PROGRESS)
        issues = self._check(frontmatter, record.body, destination)
        self._relocate(path, destination, frontmatter, record.body)
        logger.info("Ticket %s claimed by %s", destination, actor)
        self._written()
        return MutationResult(path=destination, issues=issues)

    def append_worklog(self, ref: TicketRef, entry: Any) -> MutationResult:
        """Append one work_log entry, defaulting its timestamp to now."""
        path = self._resolve(ref)
        record = self._load_mutable(path)

        if not isinstance(entry, Mapping):
            raise InvalidTicketError("entry must be an object")

        now = utc_now_iso()
        at = entry.get("at")
        new_entry = {**entry, "at": at if isinstance(at, str) and at.strip() else now}

        frontmatter = dict(record.frontmatter)
        frontmatter["updated_at"] = now
        frontmatter["work_log"] = append_work_log(frontmatter.get("work_log"), new_entry)

        issues = self._check(frontmatter, record.body, path)
        self.store.write(path, frontmatter, record.body)
        logger.info("Appended %s work_log entry to %s", new_entry.get("kind"), path)
        self._written()
        return MutationResult(path=path, issues=issues)

    def reconcile(self, ref: TicketRef | None = None, apply_fixes: bool = False) -> ReconcileResult:
        """Audit one ticket (when ref is given) or the whole store.

        With apply_fixes, fixable invariants are repaired and written back.

        Raises:
            TicketNotFoundError: ref is given but does not resolve.
        """
        if ref is not None and (ref.id or ref.path):
            targets = [self._resolve(ref)]
        else:
            targets = self.store.list_files()

        now = utc_now_iso()
        reports = [reconcile_path(self.store, path, apply_fixes, now) for path in targets]
        changed = sum(1 for report in reports if report.changed)
        unresolved = sum(1 for report in reports if report.unresolved_issues)

        if apply_fixes and changed:
            self._written()
        logger.info(
            "Reconcile (apply=%s): scanned=%d changed=%d unresolved=%d",
            apply_fixes,
            len(reports),
            changed,
            unresolved,
        )
        return ReconcileResult(
            apply_fixes=apply_fixes,
            scanned=len(reports),
            changed=changed,
            unresolved=unresolved,
            reports=reports,
        )
