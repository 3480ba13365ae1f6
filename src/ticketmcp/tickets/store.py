"""TicketStore - file-backed access to ticket records."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ticketmcp.tickets import frontmatter as codec
from ticketmcp.tickets.layout import path_for_status, status_folder
from ticketmcp.tickets.models import TicketRecord, TicketSummary
from ticketmcp.tickets.schema import INDEX_FILE, STATUS_FOLDERS, TICKETS_DIR
from ticketmcp.tickets.validator import validate_ticket

logger = logging.getLogger(__name__)


def normalize_frontmatter(frontmatter: dict[str, Any]) -> dict[str, Any]:
    """Fold the legacy 'feature' key into an empty 'epic'."""
    normalized = dict(frontmatter)
    if not normalized.get("epic") and normalized.get("feature"):
        normalized["epic"] = normalized["feature"]
    return normalized


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class TicketStore:
    """Reads and writes ticket files under ``<repo_root>/tickets``.

    Nothing is cached: every call goes to the filesystem.
    """

    def __init__(self, repo_root: str | Path) -> None:
        """Initialize the store.

        Args:
            repo_root: Repository root; tickets live in its ``tickets`` folder.
        """
        self.repo_root = Path(repo_root).resolve()
        self.tickets_root = self.repo_root / TICKETS_DIR

    @property
    def index_path(self) -> Path:
        """Location of the generated INDEX.md."""
        return self.tickets_root / INDEX_FILE

    # --- Enumeration ---

    def list_files(self) -> list[Path]:
        """All ticket files, folder by folder in status order."""
        files: list[Path] = []
        for folder in STATUS_FOLDERS:
            base = self.tickets_root / folder
            if not base.is_dir():
                continue
            files.extend(sorted(p for p in base.rglob("*.md") if p.is_file()))
        return files

    # --- Reading ---

    def read(self, path: Path) -> TicketRecord | None:
        """Read and decode a ticket file. Returns None if it does not exist.

        Undecodable or unreadable files come back as an empty record flagged
        unreadable, with the reason in parse_error.
        """
        if not path.is_file():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read ticket %s: %s", path, e)
            return TicketRecord(
                path=path,
                frontmatter={},
                body="",
                parse_error=f"Failed to read ticket: {e}",
                unreadable=True,
            )
        parsed = codec.decode(raw)
        return TicketRecord(
            path=path,
            frontmatter=normalize_frontmatter(parsed.frontmatter),
            body=parsed.body,
            parse_error=parsed.error,
        )

    def read_summary(self, path: Path) -> TicketSummary | None:
        """Read a ticket as a summary including its validation issues."""
        record = self.read(path)
        if record is None:
            return None

        fm = record.frontmatter
        issues = self.validate(record)
        return TicketSummary(
            id=_text(fm.get("id")),
            title=_text(fm.get("title")),
            status=_text(fm.get("status")),
            area=_text(fm.get("area")),
            epic=_text(fm.get("epic")),
            path=path,
            created_at=fm.get("created_at"),
            updated_at=fm.get("updated_at"),
            intent=fm.get("intent"),
            issues=issues,
        )

    def summaries(self) -> list[TicketSummary]:
        """Summaries of every readable ticket in the store."""
        result = []
        for path in self.list_files():
            summary = self.read_summary(path)
            if summary is not None:
                result.append(summary)
        return result

    def validate(self, record: TicketRecord, path: Path | None = None) -> list[str]:
        """Validate a record at its own path (or at path), parse error included."""
        if record.unreadable:
            return [record.parse_error or "Failed to read ticket"]
        issues = validate_ticket(
            record.frontmatter, record.body, path or record.path, self.tickets_root
        )
        if record.parse_error:
            issues.append(record.parse_error)
        return issues

    def find_by_id(self, ticket_id: str) -> Path | None:
        """First ticket file whose frontmatter id equals ticket_id."""
        for path in self.list_files():
            record = self.read(path)
            if record is None:
                continue
            record_id = record.frontmatter.get("id")
            if record_id is not None and str(record_id) == ticket_id:
                return path
        return None

    def resolve(self, id: str | None = None, path: str | Path | None = None) -> Path | None:
        """Resolve a ticket reference to an existing file.

        A path wins over an id; relative paths are taken from the repo root.
        """
        if path:
            candidate = Path(path)
            if not candidate.is_absolute():
                candidate = self.repo_root / candidate
            return candidate if candidate.is_file() else None
        if id:
            return self.find_by_id(str(id))
        return None

    # --- Writing ---

    def write(self, path: Path, frontmatter: dict[str, Any], body: str) -> None:
        """Encode and write a ticket, creating parent folders."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(codec.encode(frontmatter, body), encoding="utf-8")
        logger.debug("Wrote ticket %s", path)

    def delete(self, path: Path) -> None:
        """Remove a ticket file if present."""
        path.unlink(missing_ok=True)
        logger.debug("Removed ticket %s", path)

    # --- Layout ---

    def folder_of(self, path: Path) -> str | None:
        """Status folder containing path."""
        return status_folder(path, self.tickets_root)

    def path_for_status(self, path: Path, status: str) -> Path | None:
        """Destination path of a ticket moved to status."""
        return path_for_status(path, status, self.tickets_root)

    def folder_path(self, folder: str) -> Path:
        """Absolute path of a status folder."""
        return self.tickets_root / folder
