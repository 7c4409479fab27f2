"""Async client for the YouTube Data API v3 with DNS-level host failover."""

import socket
import time
from typing import Any

import httpx

from thumbcompare.core.config import get_settings
from thumbcompare.core.constants import YOUTUBE_API_BASE_PATH
from thumbcompare.core.exceptions import NetworkError, UpstreamResponseError
from thumbcompare.core.logging_config import get_logger, log_api_call

logger = get_logger("channel.api_client")

# Resolver messages seen when the underlying gaierror is not chained
_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "name resolution",
)


def is_dns_failure(exc: BaseException) -> bool:
    """
    Check whether a transport error means the host name could not be resolved.

    Only connection errors qualify. The cause chain is searched for a
    ``socket.gaierror``; failing that, the message is matched against the
    resolver errors of the common platforms.
    """
    if not isinstance(exc, httpx.ConnectError):
        return False

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        message = str(current).lower()
        if any(marker in message for marker in _DNS_FAILURE_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


class YouTubeDataClient:
    """
    Minimal read-only YouTube Data API client.

    The API key is appended to every request as the ``key`` query parameter.
    Hosts are tried in order, moving on only when a host name cannot be
    resolved. Every other failure is raised immediately.

    Usage:
        async with YouTubeDataClient(api_key) as client:
            data = await client.get_json("channels", {"part": "snippet", "forHandle": "x"})
    """

    def __init__(
        self,
        api_key: str,
        hosts: list[str] | tuple[str, ...] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()

        self.api_key = api_key
        self.hosts = list(hosts) if hosts is not None else list(settings.youtube_api_hosts)
        if not self.hosts:
            raise ValueError("At least one API host is required")

        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.youtube_api_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "YouTubeDataClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def url_for(self, host: str, resource: str) -> str:
        return f"https://{host}{YOUTUBE_API_BASE_PATH}/{resource}"

    async def get_json(self, resource: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        GET an API resource and decode the JSON body.

        Args:
            resource: API resource name (channels, search, playlistItems, videos)
            params: Query parameters, without the API key

        Returns:
            Decoded JSON object

        Raises:
            UpstreamResponseError: Non-2xx status or a body that is not a JSON object
            NetworkError: Transport failure, or no host could be resolved
        """
        query = {**params, "key": self.api_key}
        last_error: httpx.TransportError | None = None

        for host in self.hosts:
            started = time.perf_counter()
            try:
                response = await self._client.get(self.url_for(host, resource), params=query)
            except httpx.TransportError as e:
                last_error = e
                if is_dns_failure(e):
                    logger.warning(f"Cannot resolve {host}, trying next API host")
                    continue
                raise NetworkError(f"Network error: {e}") from e

            log_api_call(
                logger,
                resource=resource,
                host=host,
                status_code=response.status_code,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            return self._decode(response)

        raise NetworkError(f"Network error: no reachable API host ({last_error})") from last_error

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        if not 200 <= response.status_code <= 299:
            body = response.text or f"HTTP {response.status_code}"
            raise UpstreamResponseError(response.status_code, body)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamResponseError(
                response.status_code, f"Invalid JSON response: {response.text[:200]}"
            ) from e

        if not isinstance(data, dict):
            raise UpstreamResponseError(response.status_code, "Unexpected response shape")
        return data
