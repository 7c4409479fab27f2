"""Tests for the YouTube Data API client.

These tests verify:
- API key is sent on every request
- Non-2xx responses become UpstreamResponseError
- DNS failures on the primary host fail over to the secondary host once
- Other transport errors are not retried
"""

import socket

import httpx
import pytest

from tests.conftest import TEST_API_KEY
from thumbcompare.channel.api_client import YouTubeDataClient, is_dns_failure
from thumbcompare.core.exceptions import NetworkError, UpstreamResponseError

PRIMARY = "www.googleapis.com"
SECONDARY = "youtube.googleapis.com"


def dns_error(host: str) -> httpx.ConnectError:
    try:
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    except socket.gaierror as cause:
        error = httpx.ConnectError(f"[Errno -2] cannot resolve {host}")
        error.__cause__ = cause
        return error


class TestIsDnsFailure:
    def test_gaierror_cause(self):
        assert is_dns_failure(dns_error(PRIMARY))

    def test_resolver_message(self):
        assert is_dns_failure(httpx.ConnectError("[Errno 8] nodename nor servname provided"))

    def test_connection_refused_is_not_dns(self):
        assert not is_dns_failure(httpx.ConnectError("[Errno 111] Connection refused"))

    def test_timeout_is_not_dns(self):
        assert not is_dns_failure(httpx.ConnectTimeout("timed out"))


@pytest.mark.asyncio
async def test_get_json_sends_key_and_path(client, fake_api):
    fake_api.add_long_videos("alpha", "UCalpha", 1)

    data = await client.get_json("channels", {"part": "snippet", "forHandle": "alpha"})

    assert data["items"][0]["id"] == "UCalpha"
    request = fake_api.requests[0]
    assert request.url.host == PRIMARY
    assert request.url.path == "/youtube/v3/channels"
    assert request.url.params["key"] == TEST_API_KEY


@pytest.mark.asyncio
async def test_non_2xx_raises_upstream_error_with_body(make_client, fake_api):
    async with make_client(api_key="wrong") as client:
        with pytest.raises(UpstreamResponseError) as exc_info:
            await client.get_json("channels", {"forHandle": "alpha"})

    assert exc_info.value.status_code == 400
    assert "API key not valid" in exc_info.value.body
    assert "YouTube API error (400)" in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_json_raises_upstream_error(client, fake_api):
    fake_api.overrides["videos"] = lambda request: httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(UpstreamResponseError, match="Invalid JSON"):
        await client.get_json("videos", {"id": "x"})


@pytest.mark.asyncio
async def test_dns_failure_retries_secondary_once(client, fake_api):
    fake_api.add_long_videos("alpha", "UCalpha", 1)
    fake_api.host_errors[PRIMARY] = dns_error(PRIMARY)

    data = await client.get_json("channels", {"part": "snippet", "forHandle": "alpha"})

    assert data["items"]
    assert [r.url.host for r in fake_api.requests] == [PRIMARY, SECONDARY]


@pytest.mark.asyncio
async def test_both_hosts_unresolvable_raises_network_error(client, fake_api):
    fake_api.host_errors[PRIMARY] = dns_error(PRIMARY)
    fake_api.host_errors[SECONDARY] = dns_error(SECONDARY)

    with pytest.raises(NetworkError):
        await client.get_json("channels", {"forHandle": "alpha"})

    assert [r.url.host for r in fake_api.requests] == [PRIMARY, SECONDARY]


@pytest.mark.asyncio
async def test_other_transport_errors_not_retried(client, fake_api):
    fake_api.host_errors[PRIMARY] = httpx.ConnectError("[Errno 111] Connection refused")

    with pytest.raises(NetworkError, match="Connection refused"):
        await client.get_json("channels", {"forHandle": "alpha"})

    assert [r.url.host for r in fake_api.requests] == [PRIMARY]


@pytest.mark.asyncio
async def test_upstream_error_on_primary_not_retried(client, fake_api):
    fake_api.overrides["channels"] = lambda request: httpx.Response(403, text="quotaExceeded")

    with pytest.raises(UpstreamResponseError) as exc_info:
        await client.get_json("channels", {"forHandle": "alpha"})

    assert exc_info.value.status_code == 403
    assert len(fake_api.requests) == 1


def test_requires_a_host():
    with pytest.raises(ValueError):
        YouTubeDataClient(TEST_API_KEY, hosts=[])
