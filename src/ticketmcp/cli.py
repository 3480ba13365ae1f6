"""CLI entry point for ticketmcp."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ticketmcp import __version__
from ticketmcp.config import ConfigError, TicketConfig, find_config, load_config
from ticketmcp.logging import LogSettings, get_logger, setup_logging

logger = get_logger("cli")


def _load(
    config_path: Path | None,
    root: Path | None,
    strict: bool | None,
    verbose: bool,
    server: bool = False,
) -> TicketConfig:
    """Environment, then YAML file, then command-line flags."""
    setup_logging(LogSettings.from_env(level="DEBUG" if verbose else None), server=server)
    if config_path is None:
        config_path = find_config()
    config = load_config(config_path) if config_path else TicketConfig.from_env()

    overrides: dict[str, object] = {}
    if root is not None:
        overrides["repo_root"] = str(root.resolve())
    if strict is not None:
        overrides["strict"] = strict
    if overrides:
        config = config.merge(overrides)
    logger.debug("Configuration: %s", config)
    return config


def _common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = (
        click.option(
            "-c",
            "--config",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            help="Path to ticketmcp.yaml (auto-detected if not specified)",
        ),
        click.option(
            "--root",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Repository root containing the tickets/ folder",
        ),
        click.option("-v", "--verbose", is_flag=True, help="Enable verbose output"),
    )
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """ticketmcp - JSON-RPC control plane for Markdown tickets."""
    pass


@main.command()
@_common_options
@click.option("--host", default=None, help="Bind address (default: from config)")
@click.option("--port", type=int, default=None, help="Bind port (default: from config)")
@click.option("--strict/--no-strict", default=None, help="Reject writes with validation issues")
def serve(
    config_path: Path | None,
    root: Path | None,
    verbose: bool,
    host: str | None,
    port: int | None,
    strict: bool | None,
) -> None:
    """Run the JSON-RPC server."""
    import uvicorn  # noqa: PLC0415

    from ticketmcp.api import create_app  # noqa: PLC0415

    try:
        config = _load(config_path, root, strict, verbose, server=True)
        overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
        if overrides:
            config = config.merge(overrides)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    click.echo(f"ticket-mcp listening on http://{config.host}:{config.port}{config.rpc_path}")
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_config=None,
        log_level="debug" if verbose else "info",
    )


@main.command()
@_common_options
def validate(config_path: Path | None, root: Path | None, verbose: bool) -> None:
    """Validate every ticket and report issues (exit 1 if any)."""
    from ticketmcp.engine import TicketAggregator  # noqa: PLC0415
    from ticketmcp.tickets import TicketStore  # noqa: PLC0415

    try:
        config = _load(config_path, root, None, verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    reports = TicketAggregator(TicketStore(config.repo_root)).validate_all()
    if not reports:
        click.echo("All tickets valid.")
        return

    click.echo("Ticket validation issues:", err=True)
    for report in reports:
        click.echo(f"- {report.path}", err=True)
        for issue in report.issues:
            click.echo(f"  - {issue}", err=True)
    sys.exit(1)


@main.command()
@_common_options
def migrate(config_path: Path | None, root: Path | None, verbose: bool) -> None:
    """Add missing body sections to every ticket."""
    from ticketmcp.migrate import migrate_tickets  # noqa: PLC0415
    from ticketmcp.tickets import TicketStore  # noqa: PLC0415

    try:
        config = _load(config_path, root, None, verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    summary = migrate_tickets(TicketStore(config.repo_root))
    click.echo("Migration Complete.")
    click.echo(f"Migrated: {len(summary.migrated)}")
    click.echo(f"Skipped (already valid): {len(summary.skipped)}")
    click.echo(f"Errors: {len(summary.errors)}")


@main.command()
@_common_options
@click.option("--url", default=None, help="Endpoint URL (default: built from config)")
def proxy(config_path: Path | None, root: Path | None, verbose: bool, url: str | None) -> None:
    """Relay JSON-RPC between stdin/stdout and a running server."""
    from ticketmcp.proxy import StdioProxy  # noqa: PLC0415

    try:
        config = _load(config_path, root, None, verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    relay = StdioProxy(url) if url else StdioProxy.from_config(config)
    try:
        relay.run()
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
