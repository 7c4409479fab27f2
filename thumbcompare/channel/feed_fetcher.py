"""Uploads fetcher - recent long-form uploads of a channel."""

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from thumbcompare.core.constants import (
    MAX_PAGE_SIZE,
    PLAYLIST_ITEM_PARTS,
    SHORT_MAX_SECONDS,
    SHORTS_TITLE_MARKER,
)
from thumbcompare.core.logging_config import get_logger

from .api_client import YouTubeDataClient
from .details import fetch_video_details
from .schemas import ThumbnailCandidate, VideoDetails, VideoItem

logger = get_logger("channel.feed_fetcher")


def expanded_window(max_results: int) -> int:
    """
    Number of playlist entries to request for ``max_results`` kept videos.

    Over-fetches to absorb Shorts and unusable thumbnails, capped at the
    API page size.
    """
    return min(MAX_PAGE_SIZE, max(max_results * 3, max_results + 10))


def parse_published_at(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp such as "2024-05-01T12:00:00Z"."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_thumbnails(nodes: dict[str, Any] | None) -> dict[str, ThumbnailCandidate]:
    """Parse thumbnail tiers, dropping tiers with a malformed URL."""
    thumbnails: dict[str, ThumbnailCandidate] = {}
    for quality, node in (nodes or {}).items():
        if not isinstance(node, dict) or not node.get("url"):
            continue
        try:
            thumbnails[quality] = ThumbnailCandidate(
                url=node["url"], width=node.get("width"), height=node.get("height")
            )
        except ValidationError:
            logger.debug(f"Dropping malformed {quality} thumbnail: {node.get('url')!r}")
    return thumbnails


def parse_playlist_item(item: dict[str, Any]) -> VideoItem:
    """Build a provisional VideoItem (no view count yet) from playlistItems.list."""
    snippet = item.get("snippet") or {}
    return VideoItem(
        video_id=(snippet.get("resourceId") or {}).get("videoId"),
        title=snippet.get("title") or "",
        published_at=parse_published_at(snippet.get("publishedAt")),
        thumbnails=parse_thumbnails(snippet.get("thumbnails")),
    )


def is_short(video: VideoItem, details: VideoDetails | None) -> bool:
    """
    Decide whether a video is short-form.

    Known durations of 180 seconds or less are Shorts, as is any title
    tagged #shorts. Unknown durations are not Shorts on their own.
    """
    if details is not None and details.duration_seconds <= SHORT_MAX_SECONDS:
        return True
    return SHORTS_TITLE_MARKER in video.title.casefold()


def is_feed_candidate(video: VideoItem, details: VideoDetails | None) -> bool:
    """Long-form video with at least one landscape or widescreen thumbnail."""
    if is_short(video, details):
        return False
    return video.has_any_16x9_thumbnail or video.has_any_landscape_thumbnail


async def fetch_uploads(
    client: YouTubeDataClient,
    uploads_playlist_id: str,
    max_results: int,
) -> list[VideoItem]:
    """
    Fetch the latest qualifying uploads of a channel.

    Args:
        client: YouTube Data API client
        uploads_playlist_id: The channel's uploads playlist
        max_results: Number of videos wanted

    Returns:
        Up to ``max_results`` long-form videos, newest first
    """
    if max_results < 1:
        return []

    window = expanded_window(max_results)
    data = await client.get_json(
        "playlistItems",
        {
            "part": PLAYLIST_ITEM_PARTS,
            "playlistId": uploads_playlist_id,
            "maxResults": window,
        },
    )

    provisional = [parse_playlist_item(item) for item in data.get("items") or []]

    video_ids = [v.video_id for v in provisional if v.video_id]
    details = await fetch_video_details(client, video_ids)

    kept: list[VideoItem] = []
    for video in provisional:
        detail = details.get(video.video_id) if video.video_id else None
        enriched = video.with_details(detail) if detail is not None else video
        if is_feed_candidate(enriched, detail):
            kept.append(enriched)

    logger.debug(
        f"Playlist {uploads_playlist_id}: {len(provisional)} fetched, "
        f"{len(kept)} qualifying, keeping {min(len(kept), max_results)}"
    )
    return kept[:max_results]
