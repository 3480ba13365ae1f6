"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from ticketmcp.config import TicketConfig  # noqa: TC001
from ticketmcp.engine import TicketEngine

# Global TicketEngine instance (initialized on app startup)
_engine: TicketEngine | None = None


def init_engine(config: TicketConfig) -> TicketEngine:
    """Initialize the global TicketEngine instance."""
    global _engine  # noqa: PLW0603
    _engine = TicketEngine(config)
    return _engine


def close_engine() -> None:
    """Drop the global TicketEngine instance."""
    global _engine  # noqa: PLW0603
    _engine = None


def get_engine() -> Generator[TicketEngine, None, None]:
    """Dependency that provides the TicketEngine instance."""
    if _engine is None:
        raise RuntimeError("TicketEngine not initialized. Call init_engine() first.")
    yield _engine


# Type alias for dependency injection
EngineDep = Annotated[TicketEngine, Depends(get_engine)]
