"""Centralized logging configuration using loguru.

Provides:
- Configurable log levels from Settings
- CLI flag override (--verbose/--quiet)
- Standard library interception (SQLAlchemy, httpx, uvicorn)
- Repository context binding for sync runs
- Optional file rotation logging
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_configured = False

_CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Route standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        from types import FrameType

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        # Skip logging module frames so loguru reports the real caller
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Configure logging for the application.

    Args:
        level: Base log level from config
        verbose: If True, use DEBUG level (overrides level)
        quiet: If True, use WARNING level (overrides level)
        log_file: Optional path for file logging with rotation
        rotation: When to rotate log file (e.g., "10 MB", "1 day")
        retention: How long to keep rotated logs
        serialize: If True, output JSON format (useful for file logs)

    Returns:
        Configured logger instance

    Note:
        verbose takes precedence over quiet if both are True.
    """
    global _configured

    effective_level: LogLevel
    if verbose:
        effective_level = "DEBUG"
    elif quiet:
        effective_level = "WARNING"
    else:
        effective_level = level

    logger.remove()
    logger.configure(extra={"name": "ghtracker"})

    logger.add(
        sys.stderr,
        level=effective_level,
        format=_CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",  # Always capture everything to file
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[name]}:{function}:{line} | "
                "{extra} | "
                "{message}"
            ),
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    _intercept_stdlib_logging(effective_level)

    _configured = True
    return logger


def _intercept_stdlib_logging(level: LogLevel) -> None:
    """Intercept standard library loggers and route to loguru.

    This captures logs from:
    - SQLAlchemy (sqlalchemy.engine)
    - httpx (used by githubkit)
    - uvicorn (API server)
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    if level in ("TRACE", "DEBUG"):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    httpx_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)
    logging.getLogger("httpcore").setLevel(httpx_level)

    # uvicorn installs its own handlers; hand them over to loguru
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False


def get_logger(name: str) -> Logger:
    """Get a logger with the given name bound as context.

    Usage:
        from github_activity_tracker.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Fetched {} commits", count)

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance with name bound
    """
    return logger.bind(name=name)


def bind_repo(repository: str) -> Logger:
    """Bind repository context to logger.

    Args:
        repository: Repository name in owner/repo format

    Returns:
        Logger with repo context bound
    """
    return logger.bind(name="sync", repo=repository)


class LogContext:
    """Context manager for temporary log context binding.

    Usage:
        with LogContext(repo="owner/repo", kind="commits"):
            logger.info("Processing")  # Has repo and kind context
        logger.info("After")  # No longer has context
    """

    def __init__(self, **context: Any) -> None:
        self._context = context
        self._token: Any = None

    def __enter__(self) -> Logger:
        self._token = logger.contextualize(**self._context)
        self._token.__enter__()
        return logger

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._token:
            self._token.__exit__(exc_type, exc_val, exc_tb)


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def reset_logging() -> None:
    """Reset logging state (primarily for testing)."""
    global _configured
    logger.remove()
    _configured = False
