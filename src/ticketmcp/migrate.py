"""Bring ticket bodies up to the required section layout.

The header block is kept byte-for-byte; only the body is rewritten.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ticketmcp.tickets.frontmatter import split_header
from ticketmcp.tickets.schema import REQUIRED_BODY_HEADERS

if TYPE_CHECKING:
    from pathlib import Path

    from ticketmcp.tickets.store import TicketStore

logger = logging.getLogger(__name__)

_COMPLETION_NOTES_RE = re.compile(r"^##\s+Completion Notes[ \t]*$", re.MULTILINE)
IMPLEMENTATION_NOTES = "## Implementation Notes"


@dataclass
class MigrationSummary:
    """Counts from one migration run."""

    migrated: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    errors: list[Path] = field(default_factory=list)


def migrate_body(body: str) -> str | None:
    """Return the migrated body, or None if it already has every section.

    A "## Completion Notes" heading is renamed to "## Implementation Notes";
    any required heading still missing is appended at the end.
    """
    changed = False
    if _COMPLETION_NOTES_RE.search(body):
        body = _COMPLETION_NOTES_RE.sub(IMPLEMENTATION_NOTES, body, count=1)
        changed = True

    missing = [header for header in REQUIRED_BODY_HEADERS if header not in body]
    if missing:
        if not body.endswith("\n"):
            body += "\n"
        body += "\n" + "\n\n".join(missing) + "\n"
        changed = True

    return body if changed else None


def migrate_file(path: Path) -> bool:
    """Migrate one ticket file in place.

    Returns:
        True if the file was rewritten, False if it was already complete.

    Raises:
        ValueError: If the file has no frontmatter header.
        OSError: If the file cannot be read or written.
    """
    raw = path.read_text(encoding="utf-8")
    parts = split_header(raw)
    if parts is None:
        raise ValueError("no frontmatter")

    header, body = parts
    migrated = migrate_body(body)
    if migrated is None:
        return False
    path.write_text(header + migrated, encoding="utf-8")
    return True


def migrate_tickets(store: TicketStore) -> MigrationSummary:
    """Migrate every ticket under the store's status folders."""
    summary = MigrationSummary()
    for path in store.list_files():
        try:
            rewritten = migrate_file(path)
        except UnicodeDecodeError as e:
            logger.error("Cannot decode %s: %s", path, e)
            summary.errors.append(path)
            continue
        except ValueError:
            logger.warning("Skipping (no frontmatter): %s", path)
            summary.errors.append(path)
            continue
        except OSError as e:
            logger.error("Error processing %s: %s", path, e)
            summary.errors.append(path)
            continue

        if rewritten:
            logger.info("Migrated: %s", path)
            summary.migrated.append(path)
        else:
            summary.skipped.append(path)
    return summary
