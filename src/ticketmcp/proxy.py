"""Stdio relay: newline-delimited JSON-RPC on stdin/stdout to the HTTP endpoint."""

from __future__ import annotations

import json
import logging
import sys
from typing import IO, TYPE_CHECKING, Any

import httpx

from ticketmcp.api.models import INTERNAL_ERROR, JsonRpcError, JsonRpcResponse
from ticketmcp.logging import truncate_output

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ticketmcp.config import TicketConfig

logger = logging.getLogger(__name__)


class StdioProxy:
    """Forwards each stdin line as a POST and writes replies to stdout.

    Notifications (requests without an id) are forwarded but never answered.
    Lines that are not valid JSON are logged and dropped.
    """

    def __init__(self, url: str, output: IO[str] | None = None, timeout: float = 30.0) -> None:
        """Initialize the proxy.

        Args:
            url: Full URL of the JSON-RPC endpoint.
            output: Stream for responses (defaults to stdout).
            timeout: Per-request timeout in seconds.
        """
        self.url = url
        self.output = output if output is not None else sys.stdout
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @classmethod
    def from_config(cls, config: TicketConfig, output: IO[str] | None = None) -> StdioProxy:
        return cls(f"http://{config.host}:{config.port}{config.rpc_path}", output=output)

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the endpoint."""
        if self._client is None:
            self._client = httpx.Client(
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _write(self, text: str) -> None:
        self.output.write(text + "\n")
        self.output.flush()

    def _send_error(self, request_id: Any, message: str) -> None:
        response = JsonRpcResponse(
            id=request_id, error=JsonRpcError(code=INTERNAL_ERROR, message=message)
        )
        self._write(json.dumps(response.to_payload()))

    def handle_line(self, line: str) -> None:
        """Relay one input line."""
        trimmed = line.strip()
        if not trimmed:
            return

        try:
            request = json.loads(trimmed)
        except json.JSONDecodeError as e:
            logger.warning("Dropping malformed input line: %s", e)
            return

        request_id = request.get("id") if isinstance(request, dict) else None

        try:
            response = self.client.post(self.url, content=trimmed.encode("utf-8"))
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", self.url, e)
            self._send_error(request_id, f"Internal proxy error: {e}")
            return

        if request_id is None:
            return
        if response.is_success:
            self._write(response.text)
        else:
            body = truncate_output(response.text)
            logger.warning("HTTP %d from %s: %s", response.status_code, self.url, body)
            self._send_error(
                request_id, f"HTTP Error: {response.status_code} - {response.text}"
            )

    def run(self, lines: Iterable[str] | None = None) -> None:
        """Relay lines until input is exhausted."""
        source = lines if lines is not None else sys.stdin
        try:
            for line in source:
                self.handle_line(line)
        finally:
            self.close()
