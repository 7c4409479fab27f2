"""Core package: configuration, logging, errors and HTTP plumbing."""

from thumbcompare.core.config import Settings, get_settings, get_settings_with_yaml
from thumbcompare.core.exceptions import (
    InvalidHandleError,
    MissingCredentialError,
    NetworkError,
    ThumbCompareError,
    UpstreamResponseError,
)
from thumbcompare.core.http_session import close_all_sessions, close_session, get, get_session
from thumbcompare.core.logging_config import (
    get_logger,
    log_api_call,
    log_channel_fetch_event,
    setup_logging,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_settings_with_yaml",
    # Errors
    "ThumbCompareError",
    "MissingCredentialError",
    "InvalidHandleError",
    "UpstreamResponseError",
    "NetworkError",
    # Logging
    "setup_logging",
    "get_logger",
    "log_api_call",
    "log_channel_fetch_event",
    # HTTP
    "get_session",
    "close_session",
    "close_all_sessions",
    "get",
]
