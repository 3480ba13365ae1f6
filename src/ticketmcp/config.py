"""Configuration loading for ticketmcp."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from ticketmcp.tickets.schema import TICKETS_DIR

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3334
DEFAULT_RPC_PATH = "/mcp"
CONFIG_FILENAME = "ticketmcp.yaml"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def _parse_bool(value: Any) -> bool:
    """Anything except an explicit false is true, as with TICKET_STRICT."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() != "false"


@dataclass
class TicketConfig:
    """Runtime configuration handed to the engine and the app.

    Attributes:
        repo_root: Directory containing the ``tickets`` folder.
        strict: Reject writes that would leave validation issues.
        host: Bind address for the JSON-RPC server.
        port: Bind port for the JSON-RPC server.
        rpc_path: URL path of the JSON-RPC endpoint.
    """

    repo_root: Path = field(default_factory=Path.cwd)
    strict: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    rpc_path: str = DEFAULT_RPC_PATH

    def __post_init__(self) -> None:
        self.repo_root = Path(self.repo_root).resolve()
        if not self.rpc_path.startswith("/"):
            self.rpc_path = f"/{self.rpc_path}"

    @property
    def tickets_root(self) -> Path:
        """Root of the status folders."""
        return self.repo_root / TICKETS_DIR

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TicketConfig:
        """Build configuration from TICKET_* environment variables."""
        env = os.environ if environ is None else environ
        try:
            port = int(env.get("TICKET_MCP_PORT", DEFAULT_PORT))
        except ValueError as e:
            raise ConfigError(f"TICKET_MCP_PORT must be an integer: {e}") from e
        return cls(
            repo_root=Path(env.get("TICKET_ROOT") or Path.cwd()),
            strict=_parse_bool(env.get("TICKET_STRICT", "true")),
            host=env.get("TICKET_MCP_HOST", DEFAULT_HOST),
            port=port,
            rpc_path=env.get("TICKET_MCP_PATH", DEFAULT_RPC_PATH),
        )

    def merge(self, data: Mapping[str, Any], base_dir: Path | None = None) -> TicketConfig:
        """Return a copy with values from data applied.

        Args:
            data: Mapping with any of repo_root, strict, host, port, rpc_path.
            base_dir: Directory that a relative repo_root is resolved against.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type.
        """
        known = {"repo_root", "strict", "host", "port", "rpc_path"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        changes: dict[str, Any] = {}
        if data.get("repo_root") is not None:
            root = Path(str(data["repo_root"])).expanduser()
            if not root.is_absolute() and base_dir is not None:
                root = base_dir / root
            changes["repo_root"] = root
        if data.get("strict") is not None:
            changes["strict"] = _parse_bool(data["strict"])
        if data.get("host") is not None:
            changes["host"] = str(data["host"])
        if data.get("port") is not None:
            try:
                changes["port"] = int(data["port"])
            except (TypeError, ValueError) as e:
                raise ConfigError(f"port must be an integer: {data['port']!r}") from e
        if data.get("rpc_path") is not None:
            changes["rpc_path"] = str(data["rpc_path"])
        return replace(self, **changes)


def find_config(start: Path | None = None) -> Path | None:
    """Search upward from start (default cwd) for ticketmcp.yaml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path, base: TicketConfig | None = None) -> TicketConfig:
    """Load a YAML configuration file on top of base (default: environment).

    Args:
        config_path: Path to the YAML file.
        base: Configuration to override; defaults to TicketConfig.from_env().

    Returns:
        The merged configuration.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    base = base if base is not None else TicketConfig.from_env()
    return base.merge(data, base_dir=config_path.resolve().parent)
