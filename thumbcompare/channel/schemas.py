"""Pydantic schemas for the competitor feed."""

import uuid
from datetime import datetime, timezone
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from thumbcompare.core.constants import (
    LANDSCAPE_MIN_RATIO,
    THUMBNAIL_PREFERENCE,
    WIDESCREEN_MAX_RATIO,
    WIDESCREEN_MIN_RATIO,
)


def is_well_formed_url(value: str) -> bool:
    """Check that a string is an absolute http(s) URL with a host."""
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ThumbnailCandidate(BaseModel):
    """One quality tier of a thumbnail as returned by the API."""

    model_config = ConfigDict(frozen=True)

    url: str
    width: int | None = None
    height: int | None = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Reject relative, empty or non-http URLs."""
        v = v.strip()
        if not is_well_formed_url(v):
            raise ValueError(f"Malformed thumbnail URL: {v!r}")
        return v

    @property
    def aspect_ratio(self) -> float | None:
        """Width/height when both are known."""
        if self.width is None or self.height is None or self.height <= 0:
            return None
        return self.width / self.height

    @property
    def is_landscape(self) -> bool:
        """Wider than tall; unknown dimensions count as landscape."""
        ratio = self.aspect_ratio
        return True if ratio is None else ratio > LANDSCAPE_MIN_RATIO

    @property
    def is_16x9_like(self) -> bool:
        """Close to widescreen video framing; unknown dimensions count as 16:9."""
        ratio = self.aspect_ratio
        return True if ratio is None else WIDESCREEN_MIN_RATIO <= ratio <= WIDESCREEN_MAX_RATIO


class VideoDetails(BaseModel):
    """Duration and view count for one video, from videos.list."""

    model_config = ConfigDict(frozen=True)

    duration_seconds: int
    view_count: int | None = None


class VideoItem(BaseModel):
    """An upload as shown in the feed."""

    model_config = ConfigDict(frozen=True)

    id: str
    video_id: str | None = None
    title: str
    published_at: datetime | None = None
    view_count: int | None = None
    thumbnails: dict[str, ThumbnailCandidate] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def default_id(cls, data: Any) -> Any:
        """Use the video ID as identity, or a fresh opaque ID when missing."""
        if isinstance(data, dict) and not data.get("id"):
            data = dict(data)
            data["id"] = data.get("video_id") or uuid.uuid4().hex
        return data

    def best_thumbnail(self) -> tuple[str, str] | None:
        """
        Pick the thumbnail tier to display.

        Preference: first 16:9-like tier, then first landscape tier, then any
        tier, each scanned in quality order (maxres → default). Tiers outside
        the known quality names are only used when nothing else exists.

        Returns:
            Tuple of (quality, url) or None when the video has no thumbnails
        """
        for check in (
            lambda c: c.is_16x9_like,
            lambda c: c.is_landscape,
            lambda c: True,
        ):
            for quality in THUMBNAIL_PREFERENCE:
                candidate = self.thumbnails.get(quality)
                if candidate is not None and check(candidate):
                    return quality, candidate.url

        for quality, candidate in self.thumbnails.items():
            return quality, candidate.url
        return None

    def best_thumbnail_url(self) -> str | None:
        """URL of :meth:`best_thumbnail`, if any."""
        best = self.best_thumbnail()
        return best[1] if best else None

    @property
    def has_any_landscape_thumbnail(self) -> bool:
        return any(c.is_landscape for c in self.thumbnails.values())

    @property
    def has_any_16x9_thumbnail(self) -> bool:
        return any(c.is_16x9_like for c in self.thumbnails.values())

    def with_details(self, details: VideoDetails) -> "VideoItem":
        """Return a copy carrying the enriched view count."""
        return self.model_copy(update={"view_count": details.view_count})


class ResolvedChannel(BaseModel):
    """Channel identity plus its uploads playlist."""

    model_config = ConfigDict(frozen=True)

    channel_id: str
    channel_title: str
    avatar_url: str | None = None
    uploads_playlist_id: str


class ChannelProfile(BaseModel):
    """The user's own channel, shown next to their thumbnail."""

    title: str
    avatar_url: str | None = None


class CompetitorChannel(BaseModel):
    """Flat display record for one requested competitor handle."""

    id: str
    handle: str
    title: str
    avatar_url: str | None = None
    is_verified: bool = False
    uploads_playlist_id: str | None = None
    videos: list[VideoItem] = Field(default_factory=list)
    error_message: str | None = None
    last_fetched_at: datetime | None = None

    @model_validator(mode="after")
    def check_outcome(self) -> "CompetitorChannel":
        """A record is either a success with videos or a failure, never both."""
        if self.error_message is not None and self.videos:
            raise ValueError("A failed channel cannot carry videos")
        return self

    @property
    def failed(self) -> bool:
        return self.error_message is not None


class ChannelFetchSuccess(BaseModel):
    """Per-handle fetch that resolved and returned uploads."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    handle: str
    channel: ResolvedChannel
    videos: list[VideoItem] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_channel(self) -> CompetitorChannel:
        return CompetitorChannel(
            id=self.channel.channel_id,
            handle=self.handle,
            title=self.channel.channel_title,
            avatar_url=self.channel.avatar_url,
            is_verified=True,
            uploads_playlist_id=self.channel.uploads_playlist_id,
            videos=list(self.videos),
            last_fetched_at=self.fetched_at,
        )


class ChannelFetchFailure(BaseModel):
    """Per-handle fetch that failed during resolution or upload retrieval."""

    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    handle: str
    error_message: str
    error_type: str = "ThumbCompareError"

    def to_channel(self) -> CompetitorChannel:
        return CompetitorChannel(
            id=f"error_{self.handle.lstrip('@')}",
            handle=self.handle,
            title="Unknown Channel",
            is_verified=False,
            error_message=self.error_message,
        )


ChannelFetchResult = ChannelFetchSuccess | ChannelFetchFailure


class FeedEntry(BaseModel):
    """One card in the interleaved competitor feed."""

    model_config = ConfigDict(frozen=True)

    id: str
    video: VideoItem
    channel_title: str
    channel_avatar_url: str | None = None
    is_verified: bool = False
