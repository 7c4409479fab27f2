"""Compare pipeline: settings -> own channel -> competitors -> interleaved feed."""

import asyncio
import re
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, Field

from thumbcompare.channel.api_client import YouTubeDataClient
from thumbcompare.channel.competitors import fetch_competitors, summarize_fetch
from thumbcompare.channel.resolver import display_handle, fetch_channel_profile
from thumbcompare.channel.schemas import ChannelProfile, CompetitorChannel, FeedEntry
from thumbcompare.core.config import Settings, get_settings
from thumbcompare.core.exceptions import MissingCredentialError
from thumbcompare.core.logging_config import get_logger
from thumbcompare.feed.interleave import failed_channels, interleave
from thumbcompare.storage.credentials import (
    CredentialStore,
    load_api_key,
    load_search_fallback,
)

logger = get_logger("pipeline.compare")

NO_HANDLES_MESSAGE = "Add at least one competitor handle (example: @somechannel)."
MISSING_KEY_MESSAGE = "Missing API key. Open Settings and add your YouTube Data API key."

_HANDLE_SEPARATORS = re.compile(r"[,\s]+")


def parse_handles(text: str) -> list[str]:
    """
    Split user input into channel references.

    Commas, spaces, tabs and newlines separate entries; one leading "@" is
    removed. Entries naming the same channel (a handle and its URL, in any
    letter case) are kept once, first spelling wins.
    """
    handles: list[str] = []
    seen: set[str] = set()
    for raw in _HANDLE_SEPARATORS.split(text):
        value = raw.strip()
        if not value:
            continue
        if value.startswith("@"):
            value = value[1:]
        if not value:
            continue
        identity = display_handle(value).casefold()
        if identity in seen:
            continue
        seen.add(identity)
        handles.append(value)
    return handles


class CompareResult(BaseModel):
    """Outcome of one compare fetch, ready for presentation."""

    channels: list[CompetitorChannel] = Field(default_factory=list)
    feed: list[FeedEntry] = Field(default_factory=list)
    failed: list[CompetitorChannel] = Field(default_factory=list)
    fetch_logs: list[str] = Field(default_factory=list)
    error_message: str | None = None
    my_channel: ChannelProfile | None = None
    screen: Literal["setup", "compare"] = "setup"

    @property
    def ok(self) -> bool:
        return self.screen == "compare"


class ComparePipeline:
    """
    Competitor comparison pipeline.

    Steps:
    1. Load the API key and search fallback flag
    2. Resolve the user's own channel (optional, failures ignored)
    3. Fetch all competitors concurrently
    4. Summarize and interleave into a feed
    """

    def __init__(
        self,
        settings: Settings | None = None,
        credentials: CredentialStore | None = None,
        client_factory: Callable[[str], YouTubeDataClient] | None = None,
    ):
        self.settings = settings or get_settings()
        self.credentials = credentials or CredentialStore(self.settings.credentials_path)
        self.client_factory = client_factory or YouTubeDataClient
        self._task: asyncio.Task[CompareResult] | None = None

    async def run(
        self,
        handles_input: str,
        latest_count: int | None = None,
        my_channel_input: str | None = None,
        use_search_fallback: bool | None = None,
    ) -> CompareResult:
        """
        Main entry point for a competitor fetch.

        Args:
            handles_input: Free text with competitor handles or URLs
            latest_count: Videos per channel (clamped to the allowed range)
            my_channel_input: The user's own channel reference
            use_search_fallback: Override the stored search fallback flag

        Returns:
            CompareResult; ``screen`` is "setup" with an error message when
            nothing could be shown
        """
        api_key = load_api_key(self.credentials, self.settings)
        if not api_key:
            return CompareResult(error_message=MISSING_KEY_MESSAGE)

        handles = parse_handles(handles_input)
        if not handles:
            return CompareResult(error_message=NO_HANDLES_MESSAGE)

        count = self.settings.clamp_latest_count(
            latest_count if latest_count is not None else self.settings.feed_default_latest_count
        )
        fallback = (
            use_search_fallback
            if use_search_fallback is not None
            else load_search_fallback(self.credentials, self.settings)
        )

        logger.info(f"Fetching {len(handles)} competitor(s), {count} videos each")

        async with self.client_factory(api_key) as client:
            my_channel = None
            if my_channel_input and my_channel_input.strip():
                my_channel = await fetch_channel_profile(client, my_channel_input, fallback)

            try:
                channels = await fetch_competitors(
                    handles, count, api_key, allow_search_fallback=fallback, client=client
                )
            except MissingCredentialError as e:
                return CompareResult(error_message=str(e), my_channel=my_channel)

        summary = summarize_fetch(channels)
        result = CompareResult(
            channels=channels,
            feed=interleave(channels),
            failed=failed_channels(channels),
            fetch_logs=summary.lines,
            my_channel=my_channel,
        )

        if summary.all_failed:
            result.error_message = summary.error_message
            return result

        result.screen = "compare"
        return result

    def start(
        self,
        handles_input: str,
        latest_count: int | None = None,
        my_channel_input: str | None = None,
        use_search_fallback: bool | None = None,
    ) -> "asyncio.Task[CompareResult]":
        """
        Start a fetch in the background, superseding any fetch still running.

        Must be called from a running event loop.
        """
        self.cancel()
        self._task = asyncio.create_task(
            self.run(handles_input, latest_count, my_channel_input, use_search_fallback)
        )
        return self._task

    def cancel(self) -> bool:
        """Cancel the running fetch as a unit; False if nothing was running."""
        if self._task is None or self._task.done():
            return False
        logger.debug("Cancelling superseded competitor fetch")
        self._task.cancel()
        return True

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()


def compare_competitors(
    handles_input: str,
    latest_count: int | None = None,
    my_channel_input: str | None = None,
    use_search_fallback: bool | None = None,
) -> CompareResult:
    """
    Convenience function to run a compare fetch from synchronous code.

    Returns:
        CompareResult
    """
    pipeline = ComparePipeline()
    return asyncio.run(
        pipeline.run(handles_input, latest_count, my_channel_input, use_search_fallback)
    )
