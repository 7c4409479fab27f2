"""Video details enrichment - durations and view counts from videos.list."""

from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from thumbcompare.core.constants import MAX_VIDEO_IDS_PER_REQUEST, VIDEO_DETAIL_PARTS
from thumbcompare.core.logging_config import get_logger

from .api_client import YouTubeDataClient
from .schemas import VideoDetails

logger = get_logger("channel.details")

T = TypeVar("T")

_UNIT_SECONDS = {"H": 3600, "M": 60, "S": 1}
_DIGITS = "0123456789"


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def parse_iso_duration(value: str | None) -> int | None:
    """
    Convert an ISO-8601 time duration ("PT1H2M10S") to seconds.

    Digit runs terminated by H, M or S are accumulated left to right.
    "PT" alone is zero seconds.

    Returns:
        Total seconds, or None when the token is not a PT duration
    """
    if not value or not value.startswith("PT"):
        return None

    total = 0
    number = ""
    for ch in value[2:]:
        if ch in _DIGITS:
            number += ch
            continue
        if not number or ch not in _UNIT_SECONDS:
            return None
        total += int(number) * _UNIT_SECONDS[ch]
        number = ""

    # Digits without a unit
    if number:
        return None
    return total


def parse_view_count(value: Any) -> int | None:
    """Parse the API's string view count; missing or non-numeric is None."""
    if value is None:
        return None
    text = str(value).strip()
    # ASCII digits only: no signs, separators or other scripts
    if not text or not all(ch in _DIGITS for ch in text):
        return None
    return int(text)


def _details_from_item(item: dict[str, Any]) -> VideoDetails | None:
    seconds = parse_iso_duration((item.get("contentDetails") or {}).get("duration"))
    if seconds is None:
        return None
    return VideoDetails(
        duration_seconds=seconds,
        view_count=parse_view_count((item.get("statistics") or {}).get("viewCount")),
    )


async def fetch_video_details(
    client: YouTubeDataClient, video_ids: Sequence[str]
) -> dict[str, VideoDetails]:
    """
    Fetch duration and view count for a set of videos.

    IDs are sent in batches of up to 50, one request after another. Videos
    whose duration cannot be parsed are left out of the result.

    Args:
        client: YouTube Data API client
        video_ids: Video IDs to look up

    Returns:
        Mapping of video ID to VideoDetails
    """
    details: dict[str, VideoDetails] = {}
    if not video_ids:
        return details

    for batch in chunked(video_ids, MAX_VIDEO_IDS_PER_REQUEST):
        data = await client.get_json(
            "videos",
            {
                "part": VIDEO_DETAIL_PARTS,
                "id": ",".join(batch),
                "maxResults": MAX_VIDEO_IDS_PER_REQUEST,
            },
        )
        for item in data.get("items") or []:
            video_id = item.get("id")
            parsed = _details_from_item(item) if video_id else None
            if parsed is not None:
                details[video_id] = parsed

    logger.debug(f"Fetched details for {len(details)}/{len(video_ids)} videos")
    return details
