"""Pydantic models for the JSON-RPC transport: envelopes, tool arguments and payloads."""

import math
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ticketmcp.engine.models import (
    NewTicket,
    TicketFilters,
    TicketRef,
)

JSONRPC_VERSION = "2.0"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603

MAX_ID_PADDING = 64


# JSON-RPC envelopes


class JsonRpcRequest(BaseModel):
    """Incoming JSON-RPC request (validated loosely, checked by the dispatcher)."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str | None = None
    id: str | int | None = None
    method: str | None = None
    params: Any = None


class JsonRpcError(BaseModel):
    """JSON-RPC error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """Outgoing JSON-RPC response; exactly one of result/error is emitted."""

    jsonrpc: str = JSONRPC_VERSION
    id: str | int | None = None
    result: Any = None
    error: JsonRpcError | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize, keeping id even when null and dropping the unused member."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


class ToolCallParams(BaseModel):
    """params of a tools/call request."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    arguments: dict[str, Any] | None = None


# Tool arguments


def _as_optional_str(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


def _as_str_list(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    if isinstance(value, str | int | float):
        return [str(value)]
    return value


class ToolArgs(BaseModel):
    """Base for tool argument models; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class TicketRefArgs(ToolArgs):
    """Arguments addressing one ticket by id or path."""

    id: str | None = Field(default=None, description="Ticket id")
    path: str | None = Field(default=None, description="Absolute or repo-relative path")

    @field_validator("id", "path", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _as_optional_str(value)

    def to_ref(self) -> TicketRef:
        return TicketRef(id=self.id, path=self.path)


class ListArgs(ToolArgs):
    """Arguments for tickets.list."""

    status: list[str] | None = None
    area: list[str] | None = None
    epic: list[str] | None = None
    feature: list[str] | None = Field(default=None, description="Legacy alias of epic")
    text: str | None = None

    @field_validator("status", "area", "epic", "feature", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        return _as_str_list(value)

    def to_filters(self) -> TicketFilters:
        return TicketFilters(
            status=set(self.status or []),
            area=set(self.area or []),
            epic=set(self.epic or self.feature or []),
            text=self.text or None,
        )


class UpdateArgs(TicketRefArgs):
    """Arguments for tickets.update."""

    patch: dict[str, Any]
    work_log_entry: dict[str, Any] | None = None


class MoveArgs(TicketRefArgs):
    """Arguments for tickets.move; the engine rejects unknown statuses."""

    to_status: Any = None
    work_log_entry: dict[str, Any] | None = None


class CreateArgs(ToolArgs):
    """Arguments for tickets.create; emptiness rules are enforced by the engine."""

    id: str = ""
    title: str = ""
    area: str = ""
    epic: str | None = None
    intent: str = ""
    requirements: list[str] = Field(default_factory=list)
    human_testing_steps: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    key_files: list[str] = Field(default_factory=list)
    depends_on: list[str] = Field(default_factory=list)
    status: str | None = None
    created_at: str | None = None
    body: str | None = None
    filename: str | None = None

    @field_validator("id", "title", "area", "intent", mode="before")
    @classmethod
    def _required_text(cls, value: Any) -> Any:
        return "" if value is None else _as_optional_str(value)

    @field_validator(
        "requirements",
        "human_testing_steps",
        "constraints",
        "key_files",
        "depends_on",
        mode="before",
    )
    @classmethod
    def _listify(cls, value: Any) -> Any:
        result = _as_str_list(value)
        return [] if result is None else result

    def to_new_ticket(self) -> NewTicket:
        return NewTicket(
            id=self.id,
            title=self.title,
            area=self.area,
            intent=self.intent,
            requirements=self.requirements,
            human_testing_steps=self.human_testing_steps,
            constraints=self.constraints,
            key_files=self.key_files,
            epic=self.epic,
            depends_on=self.depends_on,
            status=self.status,
            created_at=self.created_at,
            body=self.body,
            filename=self.filename,
        )


class StatsArgs(ToolArgs):
    """tickets.stats takes no arguments."""


class NextIdArgs(ToolArgs):
    """Arguments for tickets.next_id."""

    prefix: str = "T"
    separator: str = "-"
    padding: int = 3

    @field_validator("prefix", "separator", mode="before")
    @classmethod
    def _default_non_string(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            return value
        return "T" if info.field_name == "prefix" else "-"

    @field_validator("padding", mode="before")
    @classmethod
    def _clamp_padding(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return 3
        if not math.isfinite(value):
            return 3
        return min(MAX_ID_PADDING, max(0, math.floor(value)))


class ClaimArgs(TicketRefArgs):
    """Arguments for tickets.claim."""

    actor: str = ""
    summary: str | None = None
    details: dict[str, Any] | None = None

    @field_validator("actor", mode="before")
    @classmethod
    def _actor_text(cls, value: Any) -> Any:
        return "" if value is None else _as_optional_str(value)


class AppendWorklogArgs(TicketRefArgs):
    """Arguments for tickets.append_worklog; entry shape is checked by the engine."""

    entry: Any = None


class ReconcileArgs(TicketRefArgs):
    """Arguments for tickets.reconcile."""

    apply_fixes: bool = Field(default=False, strict=True)


# Payloads


class ToolErrorResponse(BaseModel):
    """Structured engine error returned as tool data."""

    error: str
    issues: list[str] | None = None


class TicketSummaryResponse(BaseModel):
    """One row of tickets.list."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    status: str
    area: str
    epic: str
    path: Path
    created_at: Any = None
    updated_at: Any = None
    intent: Any = None
    issues: list[str] = Field(default_factory=list)


class TicketListResponse(BaseModel):
    tickets: list[TicketSummaryResponse]


class TicketDetailResponse(BaseModel):
    """Payload of tickets.get."""

    model_config = ConfigDict(from_attributes=True)

    path: Path
    frontmatter: dict[str, Any]
    body: str
    issues: list[str]
    parse_error: str | None = None


class MutationResponse(BaseModel):
    """Payload of a successful write."""

    model_config = ConfigDict(from_attributes=True)

    ok: bool = True
    path: Path
    issues: list[str] = Field(default_factory=list)


class ValidationReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: Path
    issues: list[str]


class ValidationSummaryResponse(BaseModel):
    """Whole-store validation: only tickets with issues are listed."""

    issues: list[ValidationReportResponse]


class StatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: dict[str, int]
    area: dict[str, int]
    epic: dict[str, int]
    highest_ticket_number: int
    next_ticket_number: int


class NextIdResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    highest_ticket_number: int
    next_ticket_number: int
    suggested_id: str


class ReconcileReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: Path
    changed: bool
    fixes_applied: list[str]
    before_issues: list[str]
    after_issues: list[str]
    unresolved_issues: list[str]


class ReconcileResponse(BaseModel):
    """Payload of tickets.reconcile."""

    model_config = ConfigDict(from_attributes=True)

    apply_fixes: bool
    scanned: int
    changed: int
    unresolved: int
    reports: list[ReconcileReportResponse]

