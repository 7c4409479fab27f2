"""Competitor channel acquisition: resolution, uploads, enrichment, orchestration."""

from .api_client import YouTubeDataClient, is_dns_failure
from .competitors import (
    FetchSummary,
    fetch_channel,
    fetch_competitor_results,
    fetch_competitors,
    summarize_fetch,
)
from .details import fetch_video_details, parse_iso_duration, parse_view_count
from .feed_fetcher import expanded_window, fetch_uploads
from .resolver import (
    display_handle,
    extract_channel_id,
    extract_handle,
    fetch_channel_profile,
    resolve_channel,
)
from .schemas import (
    ChannelFetchFailure,
    ChannelFetchResult,
    ChannelFetchSuccess,
    ChannelProfile,
    CompetitorChannel,
    FeedEntry,
    ResolvedChannel,
    ThumbnailCandidate,
    VideoDetails,
    VideoItem,
)

__all__ = [
    # API client
    "YouTubeDataClient",
    "is_dns_failure",
    # Resolver
    "resolve_channel",
    "fetch_channel_profile",
    "extract_channel_id",
    "extract_handle",
    "display_handle",
    # Uploads
    "fetch_uploads",
    "expanded_window",
    "fetch_video_details",
    "parse_iso_duration",
    "parse_view_count",
    # Orchestration
    "fetch_channel",
    "fetch_competitors",
    "fetch_competitor_results",
    "summarize_fetch",
    "FetchSummary",
    # Schemas
    "ThumbnailCandidate",
    "VideoItem",
    "VideoDetails",
    "ResolvedChannel",
    "ChannelProfile",
    "CompetitorChannel",
    "ChannelFetchSuccess",
    "ChannelFetchFailure",
    "ChannelFetchResult",
    "FeedEntry",
]
