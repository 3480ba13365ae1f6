"""JSON-RPC 2.0 method dispatch for the MCP surface."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ticketmcp import __version__
from ticketmcp.api.models import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolCallParams,
)
from ticketmcp.api.tools import call_tool, tool_definitions, tool_result

if TYPE_CHECKING:
    from ticketmcp.engine import TicketEngine

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "ticket-mcp"


def error_response(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return JsonRpcResponse(
        id=request_id, error=JsonRpcError(code=code, message=message)
    ).to_payload()


def _request_id(payload: Any) -> Any:
    if isinstance(payload, dict):
        value = payload.get("id")
        if value is None or isinstance(value, str | int) and not isinstance(value, bool):
            return value
    return None


def handle_message(engine: TicketEngine, payload: Any) -> dict[str, Any]:
    """Answer one decoded JSON-RPC message.

    Protocol problems become JSON-RPC error objects; tool failures are
    reported inside a successful result by call_tool.
    """
    request_id = _request_id(payload)
    if not isinstance(payload, dict) or payload.get("jsonrpc") != JSONRPC_VERSION:
        return error_response(request_id, INVALID_REQUEST, "Invalid JSON-RPC request")

    try:
        request = JsonRpcRequest.model_validate(payload)
    except ValidationError:
        return error_response(request_id, INVALID_REQUEST, "Invalid JSON-RPC request")

    try:
        if request.method == "initialize":
            result: Any = {
                "protocolVersion": PROTOCOL_VERSION,
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
                "capabilities": {"tools": {}},
            }
        elif request.method == "tools/list":
            result = {"tools": tool_definitions()}
        elif request.method == "tools/call":
            params = ToolCallParams.model_validate(
                request.params if isinstance(request.params, dict) else {}
            )
            logger.debug("tools/call %s", params.name)
            result = tool_result(call_tool(engine, params.name, params.arguments))
        else:
            return error_response(request.id, METHOD_NOT_FOUND, "Method not found")
    except Exception as e:
        logger.exception("Unhandled error in %s", request.method)
        return error_response(request.id, INTERNAL_ERROR, str(e) or "Internal error")

    return JsonRpcResponse(id=request.id, result=result).to_payload()
