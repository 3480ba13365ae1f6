"""Engine - guarded mutations, reconcile and aggregate views over the ticket store."""

from ticketmcp.engine.aggregation import TicketAggregator, extract_ticket_number
from ticketmcp.engine.exceptions import (
    ClaimError,
    DestinationError,
    InvalidTicketError,
    ValidationFailedError,
)
from ticketmcp.engine.index import IndexRefresher, render_index
from ticketmcp.engine.models import (
    MutationResult,
    NewTicket,
    NextTicketId,
    ReconcileReport,
    ReconcileResult,
    TicketDetail,
    TicketFilters,
    TicketRef,
    TicketStats,
    ValidationReport,
)
from ticketmcp.engine.mutations import TicketEngine

__all__ = [
    "ClaimError",
    "DestinationError",
    "IndexRefresher",
    "InvalidTicketError",
    "MutationResult",
    "NewTicket",
    "NextTicketId",
    "ReconcileReport",
    "ReconcileResult",
    "TicketAggregator",
    "TicketDetail",
    "TicketEngine",
    "TicketFilters",
    "TicketRef",
    "TicketStats",
    "ValidationFailedError",
    "ValidationReport",
    "extract_ticket_number",
    "render_index",
]
