"""API - JSON-RPC (MCP) surface over the ticket engine."""

from ticketmcp.api.app import create_app
from ticketmcp.api.rpc import handle_message
from ticketmcp.api.tools import TOOL_ALIASES, TOOLS, call_tool, tool_definitions

__all__ = [
    "TOOLS",
    "TOOL_ALIASES",
    "call_tool",
    "create_app",
    "handle_message",
    "tool_definitions",
]
