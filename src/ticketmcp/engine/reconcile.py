"""Audit-and-repair pass for ticket invariants."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ticketmcp.engine.models import ReconcileReport
from ticketmcp.tickets.layout import infer_status
from ticketmcp.tickets.models import TicketRecord
from ticketmcp.tickets.schema import is_valid_status
from ticketmcp.tickets.timestamps import is_valid_date

if TYPE_CHECKING:
    from pathlib import Path

    from ticketmcp.tickets.store import TicketStore

logger = logging.getLogger(__name__)

# Field, default value, fix description.
FIELD_DEFAULTS: tuple[tuple[str, Any, str], ...] = (
    ("epic", "none", "Set missing epic to 'none'"),
    ("key_files", [], "Set missing key_files to []"),
    ("requirements", [], "Set missing requirements to []"),
    ("human_testing_steps", [], "Set missing human_testing_steps to []"),
    ("constraints", [], "Set missing constraints to []"),
    ("depends_on", [], "Set missing depends_on to []"),
    ("claimed_by", None, "Set missing claimed_by to null"),
    ("claimed_at", None, "Set missing claimed_at to null"),
    ("work_log", [], "Set missing work_log to []"),
    ("review_notes", None, "Set missing review_notes to null"),
)


def apply_fixes(
    frontmatter: dict[str, Any], path: Path, store: TicketStore, now: str
) -> tuple[Path, list[str], list[str]]:
    """Repair frontmatter in place and work out where the ticket belongs.

    Returns the destination path, the fixes applied (empty if none) and any
    move that was refused because another file occupies the destination.
    Status is inferred from the folder only when missing or invalid; a
    ticket that cannot be given a valid status is left where it is.
    """
    fixes: list[str] = []
    conflicts: list[str] = []

    for key, default, note in FIELD_DEFAULTS:
        if key not in frontmatter:
            frontmatter[key] = list(default) if isinstance(default, list) else default
            fixes.append(note)

    for key in ("created_at", "updated_at"):
        if not is_valid_date(frontmatter.get(key)):
            frontmatter[key] = now
            fixes.append(f"Set invalid or missing {key} to current timestamp")

    claimed_at = frontmatter.get("claimed_at")
    if claimed_at is not None and not is_valid_date(claimed_at):
        frontmatter["claimed_at"] = None
        fixes.append("Set invalid claimed_at to null")

    if not is_valid_status(frontmatter.get("status")):
        inferred = infer_status(path, store.tickets_root)
        if inferred is not None:
            frontmatter["status"] = inferred
            fixes.append(f"Set invalid or missing status to {inferred}")

    destination = path
    status = frontmatter.get("status")
    if is_valid_status(status):
        resolved = store.path_for_status(path, status)
        if resolved is not None and resolved != path:
            if resolved.exists():
                conflicts.append(f"Cannot move ticket: {resolved} already exists")
            else:
                destination = resolved
                fixes.append(f"Moved ticket to {store.folder_of(resolved)} folder")

    return destination, fixes, conflicts


def reconcile_path(store: TicketStore, path: Path, apply: bool, now: str) -> ReconcileReport:
    """Audit one ticket file and, when apply is set, repair and rewrite it.

    Records whose frontmatter failed to parse are reported but never
    rewritten.
    """
    record = store.read(path)
    if record is None:
        failed = ["Failed to read ticket"]
        return ReconcileReport(
            path=path,
            changed=False,
            fixes_applied=[],
            before_issues=failed,
            after_issues=list(failed),
            unresolved_issues=list(failed),
        )

    before = store.validate(record)
    if not apply or record.parse_error:
        return ReconcileReport(
            path=path,
            changed=False,
            fixes_applied=[],
            before_issues=before,
            after_issues=list(before),
            unresolved_issues=list(before),
        )

    frontmatter = dict(record.frontmatter)
    destination, fixes, conflicts = apply_fixes(frontmatter, path, store, now)
    changed = bool(fixes)

    if changed:
        frontmatter["updated_at"] = now
        store.write(destination, frontmatter, record.body)
        if destination != path:
            store.delete(path)
        logger.info("Reconciled %s: %s", destination, "; ".join(fixes))

    after = store.validate(TicketRecord(destination, frontmatter, record.body)) + conflicts
    return ReconcileReport(
        path=destination,
        changed=changed,
        fixes_applied=fixes,
        before_issues=before,
        after_issues=after,
        unresolved_issues=list(after),
    )
