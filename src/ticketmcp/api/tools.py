"""Tool registry: argument models, handlers and the tools/call dispatcher."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from ticketmcp.api.models import (
    AppendWorklogArgs,
    ClaimArgs,
    CreateArgs,
    ListArgs,
    MoveArgs,
    MutationResponse,
    NextIdArgs,
    NextIdResponse,
    ReconcileArgs,
    ReconcileResponse,
    StatsArgs,
    StatsResponse,
    TicketDetailResponse,
    TicketListResponse,
    TicketRefArgs,
    TicketSummaryResponse,
    ToolArgs,
    ToolErrorResponse,
    UpdateArgs,
    ValidationReportResponse,
    ValidationSummaryResponse,
)
from ticketmcp.tickets.exceptions import TicketError, TicketNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ticketmcp.engine import TicketEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """A callable tool exposed over tools/call."""

    name: str
    description: str
    args_model: type[ToolArgs]
    handler: Callable[[TicketEngine, Any], BaseModel]

    @property
    def alias(self) -> str:
        """Underscore form advertised by tools/list (tickets.get -> tickets_get)."""
        return self.name.replace(".", "_")

    def definition(self) -> dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema.pop("description", None)
        schema.setdefault("properties", {})
        return {"name": self.alias, "description": self.description, "inputSchema": schema}


# Handlers


def _list(engine: TicketEngine, args: ListArgs) -> TicketListResponse:
    summaries = engine.aggregator.list_tickets(args.to_filters())
    return TicketListResponse(tickets=[TicketSummaryResponse.model_validate(s) for s in summaries])


def _get(engine: TicketEngine, args: TicketRefArgs) -> TicketDetailResponse:
    detail = engine.aggregator.get_ticket(args.to_ref())
    return TicketDetailResponse.model_validate(detail)


def _update(engine: TicketEngine, args: UpdateArgs) -> MutationResponse:
    result = engine.update(args.to_ref(), args.patch, args.work_log_entry)
    return MutationResponse.model_validate(result)


def _move(engine: TicketEngine, args: MoveArgs) -> MutationResponse:
    result = engine.move(args.to_ref(), args.to_status, args.work_log_entry)
    return MutationResponse.model_validate(result)


def _validate(engine: TicketEngine, args: TicketRefArgs) -> BaseModel:
    if args.id or args.path:
        path = engine.store.resolve(id=args.id, path=args.path)
        if path is None:
            raise TicketNotFoundError()
        return ValidationReportResponse.model_validate(engine.aggregator.validate_one(path))
    reports = engine.aggregator.validate_all()
    return ValidationSummaryResponse(
        issues=[ValidationReportResponse.model_validate(r) for r in reports]
    )


def _create(engine: TicketEngine, args: CreateArgs) -> MutationResponse:
    result = engine.create(args.to_new_ticket())
    return MutationResponse(path=result.path)


def _stats(engine: TicketEngine, _args: StatsArgs) -> StatsResponse:
    return StatsResponse.model_validate(engine.aggregator.stats())


def _next_id(engine: TicketEngine, args: NextIdArgs) -> NextIdResponse:
    suggestion = engine.aggregator.next_id(args.prefix, args.separator, args.padding)
    return NextIdResponse.model_validate(suggestion)


def _claim(engine: TicketEngine, args: ClaimArgs) -> MutationResponse:
    result = engine.claim(args.to_ref(), args.actor, args.summary, args.details)
    return MutationResponse.model_validate(result)


def _append_worklog(engine: TicketEngine, args: AppendWorklogArgs) -> MutationResponse:
    result = engine.append_worklog(args.to_ref(), args.entry)
    return MutationResponse.model_validate(result)


def _reconcile(engine: TicketEngine, args: ReconcileArgs) -> ReconcileResponse:
    ref = args.to_ref() if args.id or args.path else None
    return ReconcileResponse.model_validate(engine.reconcile(ref, apply_fixes=args.apply_fixes))


TOOLS: dict[str, Tool] = {
    tool.name: tool
    for tool in (
        Tool("tickets.list", "List tickets with optional filters.", ListArgs, _list),
        Tool("tickets.get", "Get a ticket by id or path.", TicketRefArgs, _get),
        Tool(
            "tickets.update",
            "Patch ticket frontmatter with validation.",
            UpdateArgs,
            _update,
        ),
        Tool("tickets.move", "Move a ticket to another status.", MoveArgs, _move),
        Tool(
            "tickets.validate",
            "Validate a single ticket or all tickets.",
            TicketRefArgs,
            _validate,
        ),
        Tool(
            "tickets.create",
            "Create a new ticket with full frontmatter.",
            CreateArgs,
            _create,
        ),
        Tool("tickets.stats", "Get ticket counts by status, area, and epic.", StatsArgs, _stats),
        Tool(
            "tickets.next_id",
            "Get the next suggested ticket id from the current max ticket number.",
            NextIdArgs,
            _next_id,
        ),
        Tool(
            "tickets.claim",
            "Claim a ticket for active work and move it to in_progress.",
            ClaimArgs,
            _claim,
        ),
        Tool(
            "tickets.append_worklog",
            "Append a work log entry to a ticket.",
            AppendWorklogArgs,
            _append_worklog,
        ),
        Tool(
            "tickets.reconcile",
            "Audit tickets for invariant drift and optionally apply deterministic fixes.",
            ReconcileArgs,
            _reconcile,
        ),
    )
}

TOOL_ALIASES: dict[str, str] = {tool.alias: name for name, tool in TOOLS.items()}


def resolve_tool_name(name: str) -> str | None:
    """Canonical dotted name for a dotted or underscore tool name."""
    if name in TOOLS:
        return name
    return TOOL_ALIASES.get(name)


def tool_definitions() -> list[dict[str, Any]]:
    """Definitions advertised by tools/list."""
    return [tool.definition() for tool in TOOLS.values()]


def call_tool(engine: TicketEngine, name: str | None, arguments: dict[str, Any] | None) -> dict:
    """Run a tool and return its JSON-ready data.

    Engine errors and bad arguments become {"error": ..., "issues": ...}
    rather than raising; anything else propagates to the RPC layer.
    """
    if not name:
        return ToolErrorResponse(error="Missing tool name").model_dump(exclude_none=True)

    canonical = resolve_tool_name(name)
    if canonical is None:
        return ToolErrorResponse(error=f"Unknown tool: {name}").model_dump(exclude_none=True)

    tool = TOOLS[canonical]
    try:
        args = tool.args_model.model_validate(arguments or {})
    except ValidationError as e:
        issues = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        error = ToolErrorResponse(error=f"Invalid arguments for {canonical}", issues=issues)
        return error.model_dump(exclude_none=True)

    try:
        payload = tool.handler(engine, args)
    except TicketError as e:
        logger.info("%s failed: %s", canonical, e.message)
        return ToolErrorResponse(error=e.message, issues=e.issues or None).model_dump(
            exclude_none=True
        )

    return payload.model_dump(mode="json")


def tool_result(data: dict[str, Any]) -> dict[str, Any]:
    """Wrap tool data in the MCP content envelope."""
    return {"content": [{"type": "text", "text": json.dumps(data, indent=2)}], "data": data}
