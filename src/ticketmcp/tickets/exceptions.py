"""Custom exceptions for ticket storage and mutation."""

from __future__ import annotations


class TicketError(Exception):
    """Base exception for ticket errors.

    Carries an optional list of issue strings for the caller.
    """

    def __init__(self, message: str, issues: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.issues = issues


class TicketNotFoundError(TicketError):
    """No ticket file resolves from the given id or path."""

    def __init__(self, message: str = "Ticket not found") -> None:
        super().__init__(message)


class TicketReadError(TicketError):
    """Ticket file disappeared or could not be read."""

    def __init__(self, message: str = "Failed to read ticket") -> None:
        super().__init__(message)


class TicketParseError(TicketError):
    """Ticket frontmatter is malformed; the record cannot be mutated."""

    def __init__(self, parse_error: str) -> None:
        super().__init__("Ticket frontmatter parse error", [parse_error])


class TicketExistsError(TicketError):
    """A ticket with this id, or a file at this path, already exists."""
