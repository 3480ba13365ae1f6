"""INDEX.md generation and fire-and-forget refresh scheduling."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from ticketmcp.tickets.schema import TicketStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ticketmcp.tickets.models import TicketSummary

logger = logging.getLogger(__name__)

ACTIVE_STATUSES: tuple[str, ...] = (
    TicketStatus.IN_PROGRESS,
    TicketStatus.BLOCKED,
    TicketStatus.PENDING,
    TicketStatus.AWAITING_HUMAN_TEST,
)
TERMINAL_STATUSES: tuple[str, ...] = (TicketStatus.DONE, TicketStatus.ARCHIVED)


def format_status_heading(status: str) -> str:
    """awaiting_human_test -> Awaiting Human Test."""
    return " ".join(word[:1].upper() + word[1:] for word in status.split("_"))


def escape_markdown_pipe(text: str) -> str:
    """Escape pipes so text fits in a table cell."""
    return text.replace("|", "\\|")


def render_index(summaries: Iterable[TicketSummary]) -> str:
    """Render the grouped-by-status Markdown index.

    Active groups come first; done and archived groups are collapsed inside
    <details>. Tickets with an unknown status are counted in the total only.
    """
    summaries = list(summaries)
    groups: dict[str, list[TicketSummary]] = defaultdict(list)
    for summary in summaries:
        groups[summary.status or "unknown"].append(summary)

    lines = [
        "# Ticket Index",
        "",
        "*Auto-generated by ticket-mcp. Do not edit by hand.*",
        "",
        f"**Total: {len(summaries)}**",
        "",
    ]

    for status in (*ACTIVE_STATUSES, *TERMINAL_STATUSES):
        tickets = sorted(
            groups.get(status, []), key=lambda s: str(s.updated_at or ""), reverse=True
        )
        if not tickets:
            continue

        terminal = status in TERMINAL_STATUSES
        lines.append(f"## {format_status_heading(status)} ({len(tickets)})")
        lines.append("")
        if terminal:
            lines.append("<details>")
            lines.append(f"<summary>Show {len(tickets)} {status} tickets</summary>")
            lines.append("")

        lines.append("| ID | Title | Area | Epic | Updated |")
        lines.append("|-----|-------|------|------|---------|")
        for ticket in tickets:
            updated = str(ticket.updated_at)[:10] if ticket.updated_at else "-"
            lines.append(
                f"| {ticket.id} | {escape_markdown_pipe(ticket.title)} | {ticket.area} "
                f"| {ticket.epic or '-'} | {updated} |"
            )

        if terminal:
            lines.append("")
            lines.append("</details>")
        lines.append("")

    return "\n".join(lines)


class IndexRefresher:
    """Runs index regeneration without making callers wait or fail.

    Inside a running event loop the refresh is spawned as a task; the task is
    referenced until it finishes. Without a loop it runs inline. Errors are
    logged and dropped either way.
    """

    def __init__(self, regenerate: Callable[[], object]) -> None:
        self._regenerate = regenerate
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of refresh tasks not yet finished."""
        return len(self._tasks)

    def schedule(self) -> None:
        """Request a refresh."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._refresh()
            return

        task = loop.create_task(self._refresh_async())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for outstanding refresh tasks (used on shutdown and in tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _refresh_async(self) -> None:
        self._refresh()

    def _refresh(self) -> None:
        try:
            self._regenerate()
        except Exception:
            logger.exception("Index regeneration failed")
