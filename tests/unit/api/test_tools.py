"""Unit tests for the tool registry and tools/call dispatch."""

import json

import pytest

from ticketmcp.api.tools import (
    TOOL_ALIASES,
    TOOLS,
    call_tool,
    resolve_tool_name,
    tool_definitions,
    tool_result,
)
from ticketmcp.engine import TicketEngine


@pytest.mark.unit
class TestRegistry:
    """Tests for tool names and definitions."""

    def test_tool_names(self) -> None:
        assert set(TOOLS) == {
            "tickets.list",
            "tickets.get",
            "tickets.update",
            "tickets.move",
            "tickets.validate",
            "tickets.create",
            "tickets.stats",
            "tickets.next_id",
            "tickets.claim",
            "tickets.append_worklog",
            "tickets.reconcile",
        }

    def test_aliases(self) -> None:
        assert TOOL_ALIASES["tickets_append_worklog"] == "tickets.append_worklog"
        assert resolve_tool_name("tickets.get") == "tickets.get"
        assert resolve_tool_name("tickets_get") == "tickets.get"
        assert resolve_tool_name("tickets.nope") is None

    def test_definitions_use_aliases(self) -> None:
        definitions = {d["name"]: d for d in tool_definitions()}

        assert set(definitions) == set(TOOL_ALIASES)
        create = definitions["tickets_create"]
        assert create["inputSchema"]["type"] == "object"
        assert "intent" in create["inputSchema"]["properties"]
        assert definitions["tickets_stats"]["inputSchema"]["properties"] == {}
        assert "patch" in definitions["tickets_update"]["inputSchema"]["required"]

    def test_tool_result_envelope(self) -> None:
        result = tool_result({"ok": True})

        assert result["data"] == {"ok": True}
        assert result["content"][0]["type"] == "text"
        assert json.loads(result["content"][0]["text"]) == {"ok": True}


@pytest.mark.unit
class TestCallTool:
    """Tests for call_tool()."""

    def test_missing_name(self, engine: TicketEngine) -> None:
        assert call_tool(engine, None, {}) == {"error": "Missing tool name"}

    def test_unknown_tool(self, engine: TicketEngine) -> None:
        assert call_tool(engine, "tickets.drop", {}) == {"error": "Unknown tool: tickets.drop"}

    def test_list_with_scalar_filter(self, engine: TicketEngine) -> None:
        """A single string is accepted where a list is expected."""
        data = call_tool(engine, "tickets_list", {"status": "pending", "text": "seed"})

        assert [t["id"] for t in data["tickets"]] == ["T-BASE-042"]
        assert isinstance(data["tickets"][0]["path"], str)

    def test_list_feature_alias(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.list", {"feature": ["none"]})

        assert len(data["tickets"]) == 3

    def test_get(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.get", {"id": "T-BASE-100"})

        assert data["frontmatter"]["id"] == "T-BASE-100"
        assert data["parse_error"] is None
        assert "Folder/status mismatch: pending vs done" in data["issues"]

    def test_get_not_found(self, engine: TicketEngine) -> None:
        assert call_tool(engine, "tickets.get", {"id": "T-NOPE"}) == {"error": "Ticket not found"}

    def test_update_missing_patch(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.update", {"id": "T-BASE-001"})

        assert data["error"] == "Invalid arguments for tickets.update"
        assert any(issue.startswith("patch") for issue in data["issues"])

    def test_update_validation_failure(self, engine: TicketEngine) -> None:
        data = call_tool(
            engine, "tickets.update", {"id": "T-BASE-001", "patch": {"status": "paused"}}
        )

        assert data["error"] == "Validation failed"
        assert data["issues"][0].startswith("Invalid status: paused.")

    def test_move_invalid_status(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.move", {"id": "T-BASE-001", "to_status": "doing"})

        assert data["error"].startswith("Invalid status: doing.")

    def test_move_missing_ticket_reported_first(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.move", {"id": "T-NOPE", "to_status": "nonsense"})

        assert data == {"error": "Ticket not found"}

    def test_validate_single(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.validate", {"id": "T-BASE-001"})

        assert data["issues"] == []
        assert data["path"].endswith("2026-01-01__T-BASE-001__fixture-ticket.md")

    def test_validate_all(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.validate", {})

        assert len(data["issues"]) == 1
        assert data["issues"][0]["path"].endswith("mismatch-ticket.md")

    def test_create_minimal_payload(self, engine: TicketEngine) -> None:
        data = call_tool(
            engine,
            "tickets.create",
            {
                "id": "T-200",
                "title": "Two Hundred",
                "area": "core",
                "intent": "Check create.",
                "requirements": "one requirement",
                "human_testing_steps": ["step"],
                "constraints": ["none"],
                "key_files": ["a.py"],
            },
        )

        assert data["ok"] is True
        assert "tickets/pending/" in data["path"]

    def test_create_invalid(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.create", {"id": "T-201", "title": "x", "area": "a"})

        assert data == {"error": "Missing required fields"}

    def test_stats_and_next_id(self, engine: TicketEngine) -> None:
        stats = call_tool(engine, "tickets.stats", {})
        next_id = call_tool(engine, "tickets.next_id", {"prefix": "T", "padding": 1.7})

        assert stats["highest_ticket_number"] == 100
        assert next_id == {
            "highest_ticket_number": 100,
            "next_ticket_number": 101,
            "suggested_id": "T-101",
        }

    def test_next_id_bad_padding_uses_default(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.next_id", {"padding": "wide", "separator": 5})

        assert data["suggested_id"] == "T-101"

    def test_next_id_padding_is_capped(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.next_id", {"padding": 1e12})

        assert data["suggested_id"] == "T-" + "101".zfill(64)

    def test_undecodable_ticket_is_tool_data(self, engine: TicketEngine, write_ticket) -> None:
        path = write_ticket("done", "legacy.md", raw="")
        path.write_bytes(b"---\nid: T-OLD-1\ntitle: caf\xe9\n---\nbody\n")

        listed = call_tool(engine, "tickets.list", {})
        validated = call_tool(engine, "tickets.validate", {})
        updated = call_tool(engine, "tickets.update", {"path": str(path), "patch": {"area": "x"}})

        assert len(listed["tickets"]) == 4
        assert any(r["path"] == str(path) for r in validated["issues"])
        assert updated["error"].startswith("Failed to read ticket: ")
        assert path.read_bytes().endswith(b"body\n")

    def test_claim_and_append(self, engine: TicketEngine) -> None:
        claimed = call_tool(engine, "tickets.claim", {"id": "T-BASE-001", "actor": "bot"})
        appended = call_tool(
            engine,
            "tickets.append_worklog",
            {"path": claimed["path"], "entry": {"actor": "bot", "kind": "note", "summary": "s"}},
        )

        assert claimed["ok"] is True
        assert "/in_progress/" in claimed["path"]
        assert appended == {"ok": True, "path": claimed["path"], "issues": []}

    def test_claim_not_pending(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.claim", {"id": "T-BASE-100", "actor": "bot"})

        assert data["error"] == "Ticket must be pending to claim (current status: done)"

    def test_reconcile_requires_strict_bool(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.reconcile", {"apply_fixes": "yes"})

        assert data["error"] == "Invalid arguments for tickets.reconcile"

    def test_reconcile_preview(self, engine: TicketEngine) -> None:
        data = call_tool(engine, "tickets.reconcile", {})

        assert data["apply_fixes"] is False
        assert data["scanned"] == 3
        assert data["unresolved"] == 1
