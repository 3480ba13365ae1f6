"""Folder layout helpers for the folder/status invariant."""

from __future__ import annotations

from pathlib import Path

from ticketmcp.tickets.schema import FOLDER_TO_STATUS, STATUS_TO_FOLDER


def status_folder(path: Path, tickets_root: Path) -> str | None:
    """Name of the status folder containing path, or None if outside all of them."""
    for folder in FOLDER_TO_STATUS:
        base = tickets_root / folder
        if path != base and path.is_relative_to(base):
            return folder
    return None


def path_for_status(path: Path, status: str, tickets_root: Path) -> Path | None:
    """Where path belongs for status, keeping its location inside the status folder.

    Returns None for an unknown status or a path outside the status folders.
    """
    target = STATUS_TO_FOLDER.get(status)
    if target is None:
        return None
    folder = status_folder(path, tickets_root)
    if folder is None:
        return None
    relative = path.relative_to(tickets_root / folder)
    return tickets_root / target / relative


def infer_status(path: Path, tickets_root: Path) -> str | None:
    """Status implied by the containing folder.

    The in_progress folder also holds blocked tickets; it always infers
    in_progress.
    """
    folder = status_folder(path, tickets_root)
    if folder is None:
        return None
    return str(FOLDER_TO_STATUS[folder][0])
