"""Pytest fixtures for the competitor feed tests.

This module provides:
- An in-memory fake of the YouTube Data API served through httpx.MockTransport
- A YouTubeDataClient wired to that fake
- Builders for API payloads (channels, playlist items, videos)
- Isolated settings and credential store
"""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from thumbcompare.channel.api_client import YouTubeDataClient
from thumbcompare.core.config import Settings
from thumbcompare.storage.credentials import CredentialStore

TEST_API_KEY = "test-api-key-123"


# =============================================================================
# Payload builders
# =============================================================================


def thumb(url: str, width: int | None = 1280, height: int | None = 720) -> dict[str, Any]:
    node: dict[str, Any] = {"url": url}
    if width is not None:
        node["width"] = width
    if height is not None:
        node["height"] = height
    return node


def widescreen_thumbnails(video_id: str) -> dict[str, Any]:
    return {
        "default": thumb(f"https://i.ytimg.com/vi/{video_id}/default.jpg", 120, 90),
        "medium": thumb(f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg", 320, 180),
        "high": thumb(f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg", 480, 360),
    }


def make_channel_item(
    channel_id: str,
    title: str,
    uploads: str | None = "auto",
    avatar: bool = True,
) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": channel_id,
        "snippet": {"title": title},
        "contentDetails": {
            "relatedPlaylists": {"uploads": f"UU{channel_id[2:]}" if uploads == "auto" else uploads}
        },
    }
    if avatar:
        item["snippet"]["thumbnails"] = {
            "default": thumb(f"https://yt3.ggpht.com/{channel_id}=s88", 88, 88),
            "medium": thumb(f"https://yt3.ggpht.com/{channel_id}=s240", 240, 240),
            "high": thumb(f"https://yt3.ggpht.com/{channel_id}=s800", 800, 800),
        }
    return item


def make_playlist_item(
    video_id: str | None,
    title: str | None = None,
    days_ago: int = 1,
    thumbnails: dict[str, Any] | None = None,
) -> dict[str, Any]:
    published_at = (datetime.now(timezone.utc) - timedelta(days=days_ago)).isoformat().replace(
        "+00:00", "Z"
    )
    return {
        "snippet": {
            "title": title if title is not None else f"Video {video_id}",
            "publishedAt": published_at,
            "resourceId": {"kind": "youtube#video", "videoId": video_id},
            "thumbnails": thumbnails if thumbnails is not None else widescreen_thumbnails(video_id or "x"),
        }
    }


def make_video_item(video_id: str, duration: str | None, views: str | None = "1000") -> dict[str, Any]:
    item: dict[str, Any] = {"id": video_id, "contentDetails": {}}
    if duration is not None:
        item["contentDetails"]["duration"] = duration
    if views is not None:
        item["statistics"] = {"viewCount": views}
    return item


# =============================================================================
# Fake API
# =============================================================================


class FakeYouTubeAPI:
    """In-memory YouTube Data API answering channels, search, playlistItems and videos."""

    def __init__(self) -> None:
        self.channels_by_handle: dict[str, dict[str, Any]] = {}
        self.channels_by_id: dict[str, dict[str, Any]] = {}
        self.search_results: dict[str, str] = {}
        self.playlists: dict[str, list[dict[str, Any]]] = {}
        self.videos: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        # resource -> callable(request) returning a Response or raising
        self.overrides: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        # host -> exception raised for every request to that host
        self.host_errors: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        # lowercased handle -> delay before answering its forHandle lookup
        self.handle_delays: dict[str, float] = {}

    def add_channel(
        self,
        handle: str,
        channel_id: str,
        title: str | None = None,
        uploads: list[dict[str, Any]] | None = None,
        videos: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        item = make_channel_item(channel_id, title or handle.title())
        self.channels_by_handle[handle.lower()] = item
        self.channels_by_id[channel_id] = item
        playlist_id = item["contentDetails"]["relatedPlaylists"]["uploads"]
        self.playlists[playlist_id] = uploads or []
        for video in videos or []:
            self.videos[video["id"]] = video
        return item

    def add_long_videos(self, handle: str, channel_id: str, count: int, prefix: str | None = None):
        prefix = prefix or handle
        uploads = [make_playlist_item(f"{prefix}{i}", days_ago=i + 1) for i in range(count)]
        videos = [make_video_item(f"{prefix}{i}", "PT10M5S", str(1000 * (i + 1))) for i in range(count)]
        return self.add_channel(handle, channel_id, uploads=uploads, videos=videos)

    def calls(self, resource: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/{resource}")]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        host = request.url.host
        if host in self.host_errors:
            raise self.host_errors[host]

        resource = request.url.path.rsplit("/", 1)[-1]
        if resource in self.delays:
            await asyncio.sleep(self.delays[resource])

        handle = (request.url.params.get("forHandle") or "").lower()
        if handle in self.handle_delays:
            await asyncio.sleep(self.handle_delays[handle])

        if resource in self.overrides:
            return self.overrides[resource](request)

        params = {k: v[0] for k, v in parse_qs(urlparse(str(request.url)).query).items()}
        if params.get("key") != TEST_API_KEY:
            return httpx.Response(400, json={"error": {"message": "API key not valid"}})

        if resource == "channels":
            return self._channels(params)
        if resource == "search":
            channel_id = self.search_results.get(params.get("q", "").lower())
            items = [{"id": {"kind": "youtube#channel", "channelId": channel_id}}] if channel_id else []
            return httpx.Response(200, json={"items": items})
        if resource == "playlistItems":
            items = self.playlists.get(params.get("playlistId", ""))
            if items is None:
                return httpx.Response(404, json={"error": {"message": "playlistNotFound"}})
            limit = int(params.get("maxResults", "5"))
            return httpx.Response(200, json={"items": items[:limit]})
        if resource == "videos":
            ids = params.get("id", "").split(",")
            return httpx.Response(
                200, json={"items": [self.videos[i] for i in ids if i in self.videos]}
            )
        return httpx.Response(404, text="unknown resource")

    def _channels(self, params: dict[str, str]) -> httpx.Response:
        if "forHandle" in params:
            item = self.channels_by_handle.get(params["forHandle"].lower())
        else:
            item = self.channels_by_id.get(params.get("id", ""))
        return httpx.Response(200, json={"items": [item] if item else []})


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_api() -> FakeYouTubeAPI:
    """Fresh fake API per test."""
    return FakeYouTubeAPI()


@pytest.fixture
def make_client(fake_api: FakeYouTubeAPI):
    """Factory for clients talking to the fake API."""

    def _make(api_key: str = TEST_API_KEY, hosts: list[str] | None = None) -> YouTubeDataClient:
        return YouTubeDataClient(
            api_key,
            hosts=hosts or ["www.googleapis.com", "youtube.googleapis.com"],
            timeout=5.0,
            transport=httpx.MockTransport(fake_api.handler),
        )

    return _make


@pytest.fixture
async def client(make_client):
    """YouTubeDataClient backed by the fake API.

    Yields:
        YouTubeDataClient instance
    """
    api_client = make_client()
    try:
        yield api_client
    finally:
        await api_client.aclose()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated to a temporary data directory."""
    return Settings(
        _env_file=None,
        youtube_api_key="",
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    """Credential store in a temporary directory."""
    return CredentialStore(tmp_path / "credentials.json")
