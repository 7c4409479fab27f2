"""Structured logging configuration for ThumbCompare."""

import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

ROOT_LOGGER_NAME = "thumbcompare"

# Module-level logger
logger: logging.Logger | None = None


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    rich_tracebacks: bool = True,
) -> logging.Logger:
    """
    Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        rich_tracebacks: Enable rich traceback formatting

    Returns:
        Configured logger instance
    """
    global logger

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    # Rich console handler (for CLI output)
    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=rich_tracebacks,
        tracebacks_show_locals=(level.upper() == "DEBUG"),
        markup=True,
    )
    rich_handler.setLevel(getattr(logging, level.upper()))
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    # Prevent logging to root logger
    logger.propagate = False

    logger.debug(f"Logging initialized (level={level})")

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get or create a logger instance.

    Args:
        name: Logger name (default: thumbcompare)

    Returns:
        Logger instance
    """
    global logger

    if logger is None:
        # Auto-setup with defaults if not configured
        logger = setup_logging(level="WARNING")

    if name == ROOT_LOGGER_NAME:
        return logger

    # Child loggers propagate to the configured root logger
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_api_call(
    logger_instance: logging.Logger,
    resource: str,
    host: str,
    status_code: int,
    duration_ms: float,
) -> None:
    """
    Log a YouTube Data API call in structured format.

    The API key is never part of the message or the extra fields.

    Args:
        logger_instance: Logger to use
        resource: API resource (channels, search, playlistItems, videos)
        host: Host the request went to
        status_code: Response status code
        duration_ms: Request duration in milliseconds
    """
    log_level = logging.DEBUG if status_code < 400 else logging.WARNING

    extra = {
        "resource": resource,
        "host": host,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }

    message = f"GET {host}/{resource} {status_code} {duration_ms:.1f}ms"
    logger_instance.log(log_level, message, extra=extra)


def log_channel_fetch_event(
    logger_instance: logging.Logger,
    handle: str,
    event: str,
    videos_fetched: int | None = None,
    error: str | None = None,
) -> None:
    """
    Log competitor channel fetch events.

    Args:
        logger_instance: Logger to use
        handle: Channel handle as shown to the user
        event: Event type (started, completed, failed)
        videos_fetched: Number of qualifying videos
        error: Error message if failed
    """
    extra: dict[str, Any] = {
        "channel_handle": handle,
        "event": event,
    }

    if videos_fetched is not None:
        extra["videos_fetched"] = videos_fetched
    if error:
        extra["error"] = error

    if event == "failed":
        logger_instance.warning(f"{handle}: FAILED - {error}", extra=extra)
    elif event == "completed":
        logger_instance.info(f"{handle}: OK ({videos_fetched} videos)", extra=extra)
    else:
        logger_instance.debug(f"Fetching {handle}...", extra=extra)
