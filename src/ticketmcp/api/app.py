"""FastAPI application setup."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticketmcp import __version__
from ticketmcp.api.dependencies import EngineDep, close_engine, init_engine
from ticketmcp.api.models import PARSE_ERROR
from ticketmcp.api.rpc import error_response, handle_message
from ticketmcp.config import TicketConfig

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    config: TicketConfig = app.state.config
    engine = init_engine(config)
    logger.info(
        "Serving tickets from %s on %s (strict=%s)",
        config.tickets_root,
        config.rpc_path,
        config.strict,
    )
    yield
    await engine.index.drain()
    close_engine()


async def rpc_endpoint(request: Request, engine: EngineDep) -> JSONResponse:
    """Handle one JSON-RPC message posted to the MCP path."""
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Rejected unparseable request body: %s", e)
        return JSONResponse(content=error_response(None, PARSE_ERROR, f"Parse error: {e}"))
    return JSONResponse(content=handle_message(engine, payload))


def create_app(config: TicketConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or TicketConfig.from_env()
    app = FastAPI(
        title="ticket-mcp",
        description="JSON-RPC control plane for Markdown tickets",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Store config for lifespan manager
    app.state.config = config

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Anything but POST on the MCP path is not found
    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND, content={"error": "Not found"}
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    app.add_api_route(config.rpc_path, rpc_endpoint, methods=["POST"])

    return app
