"""Channel reference resolver - converts handles and URLs to channels."""

from typing import Any
from urllib.parse import urlparse

from thumbcompare.core.constants import (
    AVATAR_PREFERENCE,
    CHANNEL_PARTS,
    SEARCH_PARTS,
    YOUTUBE_HOST_MARKERS,
)
from thumbcompare.core.exceptions import InvalidHandleError
from thumbcompare.core.logging_config import get_logger

from .api_client import YouTubeDataClient
from .schemas import ChannelProfile, ResolvedChannel, is_well_formed_url

logger = get_logger("channel.resolver")


def _parse_youtube_url(reference: str):
    """Parse a reference as a YouTube URL, tolerating a missing scheme."""
    candidate = reference
    if "://" not in candidate and "/" in candidate:
        candidate = "https://" + candidate

    parsed = urlparse(candidate)
    host = (parsed.hostname or "").lower()
    if not any(marker in host for marker in YOUTUBE_HOST_MARKERS):
        return None
    return parsed


def extract_channel_id(reference: str) -> str | None:
    """
    Extract a channel ID from a ``/channel/<id>`` URL.

    Args:
        reference: Trimmed user input

    Returns:
        Channel ID or None if the reference is not a channel-ID URL
    """
    parsed = _parse_youtube_url(reference)
    if parsed is None:
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) >= 2 and parts[0] == "channel":
        return parts[1]
    return None


def extract_handle(reference: str) -> str | None:
    """
    Extract a handle from ``@handle`` or a ``youtube.com/@handle`` URL.

    Args:
        reference: Trimmed user input

    Returns:
        Handle without the leading @, or None if no handle form matched
    """
    if reference.startswith("@"):
        return reference[1:]

    parsed = _parse_youtube_url(reference)
    if parsed is None:
        return None

    path = parsed.path
    marker = path.find("/@")
    if marker == -1:
        return None

    segment = path[marker + 2 :].split("/", 1)[0]
    return segment.replace("@", "") or None


def display_handle(reference: str) -> str:
    """
    Normalize a reference for display and ordering.

    Handles are shown as ``@name``; channel-ID URLs as the bare channel ID.
    """
    trimmed = reference.strip()
    channel_id = extract_channel_id(trimmed)
    if channel_id:
        return channel_id
    handle = extract_handle(trimmed) or trimmed.replace("@", "")
    return f"@{handle}"


def best_avatar_url(thumbnails: dict[str, Any] | None) -> str | None:
    """
    Pick an avatar URL from a channel snippet's thumbnails.

    Preference is high, medium, default; otherwise the first usable entry in
    the order the API returned them.
    """
    if not thumbnails:
        return None

    for key in AVATAR_PREFERENCE:
        url = (thumbnails.get(key) or {}).get("url")
        if url and is_well_formed_url(url):
            return url

    for node in thumbnails.values():
        url = (node or {}).get("url")
        if url and is_well_formed_url(url):
            return url
    return None


def _channel_from_response(data: dict[str, Any]) -> ResolvedChannel | None:
    """Build a ResolvedChannel from channels.list, or None when unusable."""
    items = data.get("items") or []
    if not items:
        return None

    first = items[0]
    uploads = ((first.get("contentDetails") or {}).get("relatedPlaylists") or {}).get("uploads")
    if not uploads or not first.get("id"):
        return None

    snippet = first.get("snippet") or {}
    return ResolvedChannel(
        channel_id=first["id"],
        channel_title=snippet.get("title") or first["id"],
        avatar_url=best_avatar_url(snippet.get("thumbnails")),
        uploads_playlist_id=uploads,
    )


async def lookup_channel_by_id(client: YouTubeDataClient, channel_id: str) -> ResolvedChannel:
    """Resolve a channel by its exact ID."""
    data = await client.get_json("channels", {"part": CHANNEL_PARTS, "id": channel_id})
    channel = _channel_from_response(data)
    if channel is None:
        raise InvalidHandleError(channel_id)
    return channel


async def lookup_channel_by_handle(
    client: YouTubeDataClient, handle: str
) -> ResolvedChannel | None:
    """Resolve a channel with ``forHandle``; None when the handle is unknown."""
    data = await client.get_json("channels", {"part": CHANNEL_PARTS, "forHandle": handle})
    return _channel_from_response(data)


async def search_channel_id(client: YouTubeDataClient, query: str) -> str | None:
    """Find a channel ID through a channel-type search (costs more quota)."""
    data = await client.get_json(
        "search",
        {"part": SEARCH_PARTS, "q": query, "type": "channel", "maxResults": 1},
    )
    items = data.get("items") or []
    if not items:
        return None
    return (items[0].get("id") or {}).get("channelId")


async def resolve_channel(
    client: YouTubeDataClient,
    reference: str,
    allow_search_fallback: bool = False,
) -> ResolvedChannel:
    """
    Resolve a free-form channel reference to a channel and its uploads playlist.

    Args:
        client: YouTube Data API client
        reference: Handle, @handle, channel URL, or channel-ID URL
        allow_search_fallback: Use search.list when forHandle finds nothing

    Returns:
        ResolvedChannel

    Raises:
        InvalidHandleError: If no channel matches the reference
    """
    trimmed = reference.strip()
    if not trimmed:
        raise InvalidHandleError(reference)

    channel_id = extract_channel_id(trimmed)
    if channel_id:
        logger.debug(f"Resolving channel ID: {channel_id}")
        return await lookup_channel_by_id(client, channel_id)

    handle = extract_handle(trimmed) or trimmed.replace("@", "")
    logger.debug(f"Resolving channel handle: @{handle}")

    channel = await lookup_channel_by_handle(client, handle)
    if channel is not None:
        return channel

    if not allow_search_fallback:
        raise InvalidHandleError(handle)

    logger.info(f"forHandle found nothing for @{handle}, falling back to search")
    found_id = await search_channel_id(client, handle)
    if not found_id:
        raise InvalidHandleError(handle)

    try:
        return await lookup_channel_by_id(client, found_id)
    except InvalidHandleError as e:
        raise InvalidHandleError(handle) from e


async def fetch_channel_profile(
    client: YouTubeDataClient,
    reference: str,
    allow_search_fallback: bool = False,
) -> ChannelProfile | None:
    """
    Resolve the user's own channel for display.

    Any failure yields None; the profile is cosmetic and must not block a fetch.
    """
    try:
        channel = await resolve_channel(client, reference, allow_search_fallback)
    except Exception as e:
        logger.warning(f"Could not load channel profile for {reference!r}: {e}")
        return None
    return ChannelProfile(title=channel.channel_title, avatar_url=channel.avatar_url)
