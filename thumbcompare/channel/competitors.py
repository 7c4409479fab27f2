"""Competitor fetch orchestration - one concurrent task per handle."""

import asyncio
from collections.abc import Sequence

from pydantic import BaseModel, Field

from thumbcompare.core.exceptions import MissingCredentialError
from thumbcompare.core.logging_config import get_logger, log_channel_fetch_event

from .api_client import YouTubeDataClient
from .feed_fetcher import fetch_uploads
from .resolver import display_handle, resolve_channel
from .schemas import (
    ChannelFetchFailure,
    ChannelFetchResult,
    ChannelFetchSuccess,
    CompetitorChannel,
)

logger = get_logger("channel.competitors")


class FetchSummary(BaseModel):
    """Per-channel log lines and the all-failed verdict of one fetch."""

    lines: list[str] = Field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    all_failed: bool = False
    error_message: str | None = None


async def fetch_channel(
    client: YouTubeDataClient,
    reference: str,
    latest_count: int,
    allow_search_fallback: bool = False,
) -> ChannelFetchResult:
    """
    Resolve one channel reference and fetch its uploads.

    Never raises for fetch problems: any error becomes a ChannelFetchFailure
    so that one bad handle does not affect the others. Cancellation is
    propagated.
    """
    handle = display_handle(reference)
    log_channel_fetch_event(logger, handle, "started")

    try:
        channel = await resolve_channel(client, reference, allow_search_fallback)
        videos = await fetch_uploads(client, channel.uploads_playlist_id, latest_count)
    except Exception as e:
        log_channel_fetch_event(logger, handle, "failed", error=str(e))
        return ChannelFetchFailure(
            handle=handle,
            error_message=str(e) or type(e).__name__,
            error_type=type(e).__name__,
        )

    log_channel_fetch_event(logger, handle, "completed", videos_fetched=len(videos))
    return ChannelFetchSuccess(handle=handle, channel=channel, videos=videos)


def _sort_key(result: ChannelFetchResult) -> tuple[str, str]:
    return result.handle.casefold(), result.handle


async def fetch_competitor_results(
    handles: Sequence[str],
    latest_count: int,
    api_key: str,
    allow_search_fallback: bool = False,
    client: YouTubeDataClient | None = None,
) -> list[ChannelFetchResult]:
    """
    Fetch every handle concurrently and return tagged per-handle results.

    Args:
        handles: Channel references as entered by the user
        latest_count: Videos wanted per channel
        api_key: YouTube Data API key
        allow_search_fallback: Use search.list when forHandle finds nothing
        client: Optional client to reuse (its API key takes precedence)

    Returns:
        One result per handle, ordered case-insensitively by handle

    Raises:
        MissingCredentialError: If no API key is configured
    """
    if not handles:
        return []

    if client is None and not api_key.strip():
        raise MissingCredentialError()
    if client is not None and not client.api_key.strip():
        raise MissingCredentialError()

    owns_client = client is None
    api = client or YouTubeDataClient(api_key.strip())

    try:
        results = await asyncio.gather(
            *(
                fetch_channel(api, handle, latest_count, allow_search_fallback)
                for handle in handles
            )
        )
    finally:
        if owns_client:
            await api.aclose()

    return sorted(results, key=_sort_key)


async def fetch_competitors(
    handles: Sequence[str],
    latest_count: int,
    api_key: str,
    allow_search_fallback: bool = False,
    client: YouTubeDataClient | None = None,
) -> list[CompetitorChannel]:
    """Fetch competitors and adapt the results to display records."""
    results = await fetch_competitor_results(
        handles, latest_count, api_key, allow_search_fallback, client=client
    )
    return [result.to_channel() for result in results]


def summarize_fetch(channels: Sequence[CompetitorChannel]) -> FetchSummary:
    """
    Build the fetch log shown to the user.

    Returns:
        FetchSummary whose ``all_failed`` is set only when every channel failed
    """
    summary = FetchSummary()
    for channel in channels:
        if channel.error_message is not None:
            summary.lines.append(f"{channel.handle}: FAILED - {channel.error_message}")
            summary.failed += 1
        else:
            summary.lines.append(f"{channel.handle}: OK ({len(channel.videos)} videos)")
            summary.succeeded += 1

    if channels and summary.succeeded == 0:
        first_error = next(
            (c.error_message for c in channels if c.error_message), "Unknown fetch error"
        )
        summary.all_failed = True
        summary.error_message = f"All competitor fetches failed: {first_error}"
    return summary
