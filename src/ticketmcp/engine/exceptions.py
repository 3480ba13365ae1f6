"""Exceptions raised by the mutation engine."""

from ticketmcp.tickets.exceptions import TicketError


class InvalidTicketError(TicketError):
    """Caller-supplied arguments are missing or malformed."""


class ValidationFailedError(TicketError):
    """Strict mode rejected a write that would leave validation issues."""

    def __init__(self, issues: list[str]) -> None:
        super().__init__("Validation failed", issues)


class ClaimError(TicketError):
    """Ticket is not in a claimable state."""


class DestinationError(TicketError):
    """Destination path for a relocation cannot be determined."""

    def __init__(self, message: str = "Unable to resolve destination path") -> None:
        super().__init__(message)
