"""Feed assembly and display formatting."""

from .formatting import compact_views, relative_time, video_stats_line
from .interleave import failed_channels, feed_entries_for, interleave

__all__ = [
    "interleave",
    "feed_entries_for",
    "failed_channels",
    "compact_views",
    "relative_time",
    "video_stats_line",
]
