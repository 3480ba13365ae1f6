"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from ticketmcp.config import TicketConfig
from ticketmcp.engine import TicketEngine
from ticketmcp.tickets import TicketStore
from ticketmcp.tickets.frontmatter import encode
from ticketmcp.tickets.schema import default_body

FIXTURE_DATE = "2026-01-01T00:00:00Z"


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@pytest.fixture(autouse=True)
def _log_dir(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep rotating log files out of the working directory."""
    monkeypatch.setenv("TICKETMCP_LOG_DIR", str(tmp_path_factory.mktemp("logs")))


def make_frontmatter(ticket_id: str, title: str, status: str = "pending", **overrides: Any) -> dict:
    """A frontmatter mapping that passes validation."""
    frontmatter: dict[str, Any] = {
        "id": ticket_id,
        "title": title,
        "status": status,
        "created_at": FIXTURE_DATE,
        "updated_at": FIXTURE_DATE,
        "area": "core",
        "epic": "none",
        "key_files": ["src/example.py"],
        "intent": f"{title} intent.",
        "requirements": ["Do the thing"],
        "human_testing_steps": ["Check the thing"],
        "constraints": ["Keep it small"],
        "depends_on": [],
        "claimed_by": None,
        "claimed_at": None,
        "work_log": [],
        "review_notes": None,
    }
    frontmatter.update(overrides)
    return frontmatter


WriteTicket = Callable[..., Path]


@pytest.fixture
def write_ticket(tmp_path: Path) -> WriteTicket:
    """Write a ticket file under tmp_path/tickets/<folder>/<filename>."""

    def _write(
        folder: str,
        filename: str,
        frontmatter: dict[str, Any] | None = None,
        body: str | None = None,
        raw: str | None = None,
    ) -> Path:
        path = tmp_path / "tickets" / folder / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        if raw is None:
            fm = frontmatter or {}
            raw = encode(fm, body if body is not None else default_body(str(fm.get("title", ""))))
        path.write_text(raw, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def repo_root(tmp_path: Path, write_ticket: WriteTicket) -> Path:
    """Repository with a fixture ticket, a seed ticket and a drifted ticket."""
    write_ticket(
        "pending",
        "2026-01-01__T-BASE-001__fixture-ticket.md",
        make_frontmatter(
            "T-BASE-001",
            "Fixture Ticket",
            intent="Baseline ticket used for MCP integration tests.",
        ),
    )
    write_ticket(
        "pending",
        "2026-01-02__T-BASE-042__seed-ticket.md",
        make_frontmatter(
            "T-BASE-042",
            "Seed Ticket",
            created_at="2026-01-02T00:00:00Z",
            updated_at="2026-01-02T00:00:00Z",
        ),
    )
    write_ticket(
        "pending",
        "2026-01-03__T-BASE-100__mismatch-ticket.md",
        {
            "id": "T-BASE-100",
            "title": "Mismatch Ticket",
            "status": "done",
            "created_at": "not-a-date",
            "updated_at": "still-not-a-date",
            "area": "core",
            "epic": "none",
            "key_files": [],
            "intent": "Ticket whose folder and fields have drifted.",
            "requirements": [],
            "human_testing_steps": [],
            "constraints": [],
        },
        default_body("Mismatch Ticket"),
    )
    return tmp_path


@pytest.fixture
def config(repo_root: Path) -> TicketConfig:
    """Strict configuration rooted at the fixture repository."""
    return TicketConfig(repo_root=repo_root)


@pytest.fixture
def store(repo_root: Path) -> TicketStore:
    return TicketStore(repo_root)


@pytest.fixture
def engine(config: TicketConfig, store: TicketStore) -> TicketEngine:
    return TicketEngine(config, store=store)


@pytest.fixture
def frontmatter_factory() -> Callable[..., dict]:
    """Expose make_frontmatter to test modules."""
    return make_frontmatter
