"""Logging shared by the server, the CLI commands and the stdio relay.

Records go to a size-rotated file and, unless disabled, to stderr. Nothing
is ever logged to stdout: the stdio relay owns that stream.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "ticketmcp"
SERVER_LOGGER = "uvicorn"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_DISABLED = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class LogSettings:
    """Where log records go and how much is kept.

    Attributes:
        directory: Folder for the log file (TICKETMCP_LOG_DIR).
        filename: Log file name inside directory.
        level: Level name (TICKETMCP_LOG_LEVEL); unknown names mean INFO.
        max_bytes: Size at which the file rotates.
        backup_count: Rotated files kept beside the active one.
        console: Also write to stderr (TICKETMCP_LOG_CONSOLE=0 disables).
    """

    directory: Path = field(default_factory=lambda: Path("logs"))
    filename: str = "ticketmcp.log"
    level: str = "INFO"
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    console: bool = True

    @property
    def path(self) -> Path:
        return self.directory / self.filename

    @property
    def numeric_level(self) -> int:
        return logging.getLevelNamesMapping().get(self.level.upper(), logging.INFO)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> LogSettings:
        """Read TICKETMCP_LOG_* variables; non-None keyword overrides win."""
        env = os.environ if environ is None else environ
        settings = cls()
        if env.get("TICKETMCP_LOG_DIR"):
            settings = replace(settings, directory=Path(env["TICKETMCP_LOG_DIR"]))
        if env.get("TICKETMCP_LOG_LEVEL"):
            settings = replace(settings, level=env["TICKETMCP_LOG_LEVEL"])
        if "TICKETMCP_LOG_CONSOLE" in env:
            console = env["TICKETMCP_LOG_CONSOLE"].strip().lower() not in _DISABLED
            settings = replace(settings, console=console)
        if overrides.get("directory") is not None:
            overrides["directory"] = Path(overrides["directory"])
        return replace(settings, **{k: v for k, v in overrides.items() if v is not None})


def _detach_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(settings: LogSettings | None = None, server: bool = False) -> logging.Logger:
    """Install the file and console handlers on the ticketmcp logger.

    Calling it again replaces the previous handlers.

    Args:
        settings: Destination and level; defaults to LogSettings.from_env().
        server: Also route uvicorn's records through the same handlers.

    Returns:
        The package logger.
    """
    settings = settings if settings is not None else LogSettings.from_env()
    settings.directory.mkdir(parents=True, exist_ok=True)
    level = settings.numeric_level
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            settings.path,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
    ]
    if settings.console:
        handlers.append(logging.StreamHandler(sys.stderr))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    names = (PACKAGE_LOGGER, SERVER_LOGGER) if server else (PACKAGE_LOGGER,)
    for name in names:
        target = logging.getLogger(name)
        _detach_handlers(target)
        target.setLevel(level)
        for handler in handlers:
            target.addHandler(handler)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.info("Logging to %s (level=%s)", settings.path, logging.getLevelName(level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a component; 'proxy' becomes 'ticketmcp.proxy'."""
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def truncate_output(text: str, max_length: int = 2000) -> str:
    """Shorten text for a log line, noting how much was cut."""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}\n... [truncated, {len(text) - max_length} more chars]"
