"""HTTP session management for thumbnail and avatar downloads."""

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from thumbcompare.core.constants import APP_NAME, APP_VERSION

# Global session cache
_sessions: dict[str, requests.Session] = {}


def get_session(
    name: str = "images",
    timeout: int = 30,
    max_retries: int = 3,
    backoff_factor: float = 0.5,
) -> requests.Session:
    """
    Get or create a cached HTTP session with retry logic.

    Sessions are reused to benefit from connection pooling.

    Args:
        name: Session name for caching (use different names for different purposes)
        timeout: Request timeout in seconds
        max_retries: Maximum number of retries for failed requests
        backoff_factor: Backoff factor for retries (delay = backoff_factor * (2 ** retry))

    Returns:
        Configured requests.Session instance
    """
    if name in _sessions:
        return _sessions[name]

    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["HEAD", "GET"],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.headers.update(
        {
            "User-Agent": f"{APP_NAME}/{APP_VERSION}",
            "Accept": "image/avif,image/webp,image/*,*/*;q=0.8",
        }
    )

    # Store timeout in session for convenience
    session._timeout = timeout  # type: ignore[attr-defined]

    _sessions[name] = session
    return session


def close_session(name: str = "images") -> None:
    """
    Close and remove a cached session.

    Args:
        name: Session name to close
    """
    if name in _sessions:
        _sessions[name].close()
        del _sessions[name]


def close_all_sessions() -> None:
    """Close all cached sessions."""
    for session in _sessions.values():
        session.close()
    _sessions.clear()


def get(url: str, session_name: str = "images", timeout: int | None = None, **kwargs: Any) -> requests.Response:
    """Make GET request using cached session."""
    session = get_session(session_name)

    # Use provided timeout or session default
    if timeout is None:
        timeout = getattr(session, "_timeout", 30)

    return session.get(url, timeout=timeout, **kwargs)
