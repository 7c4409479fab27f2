"""Round-robin feed interleaving across competitor channels."""

from collections import deque
from collections.abc import Sequence

from thumbcompare.channel.schemas import CompetitorChannel, FeedEntry


def feed_entries_for(channel: CompetitorChannel) -> list[FeedEntry]:
    """Project one channel's videos into feed entries."""
    return [
        FeedEntry(
            id=f"{channel.id}_{video.id}",
            video=video,
            channel_title=channel.title,
            channel_avatar_url=channel.avatar_url,
            is_verified=channel.is_verified,
        )
        for video in channel.videos
    ]


def interleave(channels: Sequence[CompetitorChannel]) -> list[FeedEntry]:
    """
    Merge channels into one feed, taking one video per channel per round.

    Failed channels are skipped. Exhausted channels drop out of the rotation,
    so ``[A:[a1, a2, a3], B:[b1]]`` becomes ``[a1, b1, a2, a3]``.
    """
    queues = [
        deque(feed_entries_for(channel))
        for channel in channels
        if channel.error_message is None
    ]
    queues = [q for q in queues if q]

    mixed: list[FeedEntry] = []
    while queues:
        for queue in queues:
            mixed.append(queue.popleft())
        queues = [q for q in queues if q]
    return mixed


def failed_channels(channels: Sequence[CompetitorChannel]) -> list[CompetitorChannel]:
    """Channels whose fetch failed, in input order."""
    return [channel for channel in channels if channel.error_message is not None]
