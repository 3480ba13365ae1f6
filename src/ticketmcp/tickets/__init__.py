"""Tickets - frontmatter codec, schema validation and file-backed store."""

from ticketmcp.tickets.exceptions import (
    TicketError,
    TicketExistsError,
    TicketNotFoundError,
    TicketParseError,
    TicketReadError,
)
from ticketmcp.tickets.frontmatter import ParsedFrontmatter, decode, encode
from ticketmcp.tickets.models import TicketRecord, TicketSummary, WorkLogEntry
from ticketmcp.tickets.schema import (
    REQUIRED_BODY_HEADERS,
    REQUIRED_FIELDS,
    STATUS_TO_FOLDER,
    TicketStatus,
    WorkLogKind,
    suggest_status,
)
from ticketmcp.tickets.store import TicketStore
from ticketmcp.tickets.validator import validate_ticket

__all__ = [
    "REQUIRED_BODY_HEADERS",
    "REQUIRED_FIELDS",
    "STATUS_TO_FOLDER",
    "ParsedFrontmatter",
    "TicketError",
    "TicketExistsError",
    "TicketNotFoundError",
    "TicketParseError",
    "TicketReadError",
    "TicketRecord",
    "TicketStatus",
    "TicketStore",
    "TicketSummary",
    "WorkLogEntry",
    "WorkLogKind",
    "decode",
    "encode",
    "suggest_status",
    "validate_ticket",
]
