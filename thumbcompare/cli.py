"""CLI for ThumbCompare."""

import asyncio
import json
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from thumbcompare.core.config import get_settings_with_yaml
from thumbcompare.core.constants import CREDENTIAL_API_KEY, CREDENTIAL_SEARCH_FALLBACK
from thumbcompare.core.logging_config import setup_logging
from thumbcompare.feed.formatting import video_stats_line
from thumbcompare.pipeline.compare import CompareResult, ComparePipeline
from thumbcompare.storage.credentials import (
    CredentialStore,
    load_api_key,
    load_search_fallback,
    mask_secret,
)
from thumbcompare.storage.image_cache import ImageCache, ImageLoader

app = typer.Typer(help="ThumbCompare - Compare your thumbnail against the latest competitor feed")
settings_app = typer.Typer(help="API key and search fallback settings")
app.add_typer(settings_app, name="settings")
console = Console()


def _init(verbose: bool = False):
    settings = get_settings_with_yaml()
    setup_logging(level="DEBUG" if verbose else settings.log_level, log_file=settings.log_file)
    return settings


@app.command()
def fetch(
    handles: list[str] = typer.Argument(
        ..., help="Competitor handles, @handles or channel URLs (commas allowed)"
    ),
    latest: int | None = typer.Option(None, "-n", "--latest", help="Latest videos per channel (3-30)"),
    my_channel: str | None = typer.Option(None, "--my-channel", help="Your channel handle or URL"),
    search_fallback: bool | None = typer.Option(
        None,
        "--search-fallback/--no-search-fallback",
        help="Use search when forHandle fails (uses more API quota)",
    ),
    output: Path | None = typer.Option(None, help="Output JSON file path (optional)"),
    prefetch_images: bool = typer.Option(
        False, "--prefetch-images", help="Download feed thumbnails into the image cache"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show detailed output"),
):
    """Fetch competitor uploads and show them as one interleaved feed."""
    settings = _init(verbose)

    try:
        pipeline = ComparePipeline(settings=settings)
        result = asyncio.run(
            pipeline.run(" ".join(handles), latest, my_channel, search_fallback)
        )
    except Exception as e:
        rprint(f"[red]✗ Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    _display_logs(result)

    if result.error_message:
        rprint(f"\n[red]✗ {escape(result.error_message)}[/red]")

    if not result.ok:
        raise typer.Exit(1)

    _display_feed(result)

    if prefetch_images:
        _prefetch_images(result, ImageLoader(ImageCache(settings.image_cache_path)))

    if output:
        output_path = Path(output)
        with open(output_path, "w") as f:
            json.dump(result.model_dump(mode="json"), f, indent=2)
        rprint(f"\n[green]✓ Results saved to: {output_path}[/green]")


def _display_logs(result: CompareResult):
    """Display the per-channel fetch log."""
    if not result.fetch_logs:
        return

    rprint("\n[bold]Fetch Log[/bold]")
    for line in result.fetch_logs:
        style = "red" if "FAILED" in line else "dim"
        rprint(f"  [{style}]{escape(line)}[/{style}]")


def _display_feed(result: CompareResult):
    """Display the interleaved competitor feed."""
    if result.my_channel:
        rprint(
            Panel(
                f"Channel: {escape(result.my_channel.title)}\n"
                f"Avatar: {result.my_channel.avatar_url or 'N/A'}",
                title="Your Channel",
                expand=False,
            )
        )

    rprint(f"\n[bold blue]📺 Competitor Feed ({len(result.feed)} videos)[/bold blue]\n")

    table = Table()
    table.add_column("#", style="dim", justify="right")
    table.add_column("Channel", style="cyan", width=22)
    table.add_column("Title", style="white", width=56)
    table.add_column("Stats", style="green")
    table.add_column("Thumbnail", style="dim")

    for i, entry in enumerate(result.feed, 1):
        title = entry.video.title
        if len(title) > 54:
            title = title[:51] + "..."
        best = entry.video.best_thumbnail()
        table.add_row(
            str(i),
            escape(entry.channel_title),
            escape(title),
            video_stats_line(entry.video),
            best[0] if best else "N/A",
        )

    console.print(table)

    if result.failed:
        rprint("\n[bold red]Failed Handles[/bold red]")
        for channel in result.failed:
            rprint(f"  [red]{escape(channel.handle)}: {escape(channel.error_message or 'Unknown error')}[/red]")


def _prefetch_images(result: CompareResult, loader: ImageLoader):
    """Warm the image cache with feed thumbnails and channel avatars."""
    loaded = 0
    failed = 0
    for entry in result.feed:
        best = entry.video.best_thumbnail()
        if best is None:
            continue
        quality, url = best
        if loader.load(entry.video.video_id, quality, url) is None:
            failed += 1
        else:
            loaded += 1

    for channel in result.channels:
        if channel.avatar_url:
            loader.load(None, "avatar", channel.avatar_url)

    rprint(f"\n[green]✓ Cached {loaded} thumbnail(s)[/green]" + (f", [red]{failed} failed[/red]" if failed else ""))


@app.command()
def resolve(
    reference: str = typer.Argument(..., help="Handle, @handle, channel URL or channel-ID URL"),
    search_fallback: bool | None = typer.Option(
        None, "--search-fallback/--no-search-fallback", help="Use search when forHandle fails"
    ),
):
    """Resolve a channel reference and show its uploads playlist."""
    from thumbcompare.channel.api_client import YouTubeDataClient
    from thumbcompare.channel.resolver import resolve_channel

    settings = _init()
    store = CredentialStore(settings.credentials_path)
    api_key = load_api_key(store, settings)
    if not api_key:
        rprint("[red]✗ Missing API key. Run `thumbcompare settings set-key`.[/red]")
        raise typer.Exit(1)

    fallback = search_fallback if search_fallback is not None else load_search_fallback(store, settings)

    async def _resolve():
        async with YouTubeDataClient(api_key) as client:
            return await resolve_channel(client, reference, fallback)

    try:
        channel = asyncio.run(_resolve())
    except Exception as e:
        rprint(f"[red]✗ Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    summary_table = Table(show_header=False, box=None)
    summary_table.add_column("Field", style="cyan", width=20)
    summary_table.add_column("Value", style="white")
    summary_table.add_row("Channel ID", channel.channel_id)
    summary_table.add_row("Title", escape(channel.channel_title))
    summary_table.add_row("Uploads Playlist", channel.uploads_playlist_id)
    summary_table.add_row("Avatar", channel.avatar_url or "N/A")
    console.print(summary_table)


# Settings commands


@settings_app.command("set-key")
def settings_set_key(
    api_key: str = typer.Option(
        ..., prompt="YouTube Data API key", hide_input=True, help="YouTube Data API v3 key"
    ),
):
    """Store the YouTube Data API key."""
    settings = _init()
    store = CredentialStore(settings.credentials_path)
    if not store.save(CREDENTIAL_API_KEY, api_key.strip()):
        rprint("[red]✗ Could not save the API key[/red]")
        raise typer.Exit(1)
    rprint(f"[green]✓ API key saved ({mask_secret(api_key.strip())})[/green]")


@settings_app.command("fallback")
def settings_fallback(
    state: str = typer.Argument(..., help="on or off"),
):
    """Enable or disable the search fallback when forHandle fails."""
    value = state.strip().lower()
    if value not in ("on", "off"):
        rprint("[red]✗ Expected 'on' or 'off'[/red]")
        raise typer.Exit(1)

    settings = _init()
    store = CredentialStore(settings.credentials_path)
    if not store.save(CREDENTIAL_SEARCH_FALLBACK, "1" if value == "on" else "0"):
        rprint("[red]✗ Could not save the setting[/red]")
        raise typer.Exit(1)
    rprint(f"[green]✓ Search fallback {value}[/green]")


@settings_app.command("show")
def settings_show():
    """Show the current settings (API key masked)."""
    settings = _init()
    store = CredentialStore(settings.credentials_path)

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="cyan", width=22)
    table.add_column("Value", style="white")
    table.add_row("API key", mask_secret(load_api_key(store, settings)))
    table.add_row("Search fallback", "on" if load_search_fallback(store, settings) else "off")
    table.add_row("Latest per channel", str(settings.feed_default_latest_count))
    table.add_row("API hosts", ", ".join(settings.youtube_api_hosts))
    table.add_row("Credential store", str(settings.credentials_path))
    table.add_row("Image cache", str(settings.image_cache_path))
    console.print(table)


if __name__ == "__main__":
    app()
