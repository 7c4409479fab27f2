"""Display helpers for feed cards."""

from datetime import datetime, timezone

from thumbcompare.channel.schemas import VideoItem

_SCALES = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def compact_views(value: int) -> str:
    """Format a view count as "1.2M views", dropping a trailing ".0"."""
    for threshold, suffix in _SCALES:
        if value >= threshold:
            number = f"{value / threshold:.1f}".removesuffix(".0")
            return f"{number}{suffix} views"
    return f"{value} views"


def relative_time(published_at: datetime, now: datetime | None = None) -> str:
    """Format a publish time as "3 days ago" or "5 hours ago" (at least 1 hour)."""
    now = now or datetime.now(timezone.utc)
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)

    delta = max(1, int((now - published_at).total_seconds()))
    days = delta // 86400
    if days >= 1:
        return "1 day ago" if days == 1 else f"{days} days ago"

    hours = max(1, delta // 3600)
    return "1 hour ago" if hours == 1 else f"{hours} hours ago"


def video_stats_line(video: VideoItem, now: datetime | None = None) -> str:
    """Views and age joined with a bullet; empty when neither is known."""
    parts: list[str] = []
    if video.view_count is not None:
        parts.append(compact_views(video.view_count))
    if video.published_at is not None:
        parts.append(relative_time(video.published_at, now))
    return " • ".join(parts)
