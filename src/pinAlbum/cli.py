"""Typer-based developer shell over the pin/album pipeline."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from .appctx import AppContext, create_app_context
from .errors import (
    AlbumNotFoundError,
    BadDownloadError,
    FetchError,
    LocationNotFoundError,
    PinAlbumError,
    SettingsError,
    StoreUnavailableError,
)

app = typer.Typer(help="Drop pins and fill their albums with nearby Flickr photos")
console = Console()

_context: Optional[AppContext] = None


def _ctx() -> AppContext:
    if _context is None:  # pragma: no cover - callback always runs first
        raise typer.Exit(2)
    return _context


@app.callback()
def main(
    settings: Optional[Path] = typer.Option(None, "--settings", help="Path to settings.json"),
) -> None:
    global _context
    try:
        _context = create_app_context(settings)
    except (SettingsError, StoreUnavailableError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (AlbumNotFoundError, LocationNotFoundError, BadDownloadError, FetchError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except PinAlbumError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc
        finally:
            if _context is not None:
                _context.close()

    return wrapper


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@app.command()
@_handle_errors
def drop(
    latitude: float = typer.Argument(..., min=-90.0, max=90.0),
    longitude: float = typer.Argument(..., min=-180.0, max=180.0),
) -> None:
    """Drop a pin and download its album."""

    resp = _ctx().service.drop_pin(latitude, longitude)
    if not resp.success:
        _fail(resp.error)
    print(f"[green]Pin {resp.location_id} dropped, album {resp.album_id}")
    with console.status("Downloading photos..."):
        outcome = resp.hydration.result()
    print(f"[green]Album {resp.album_id}: {outcome.value}")


@app.command()
@_handle_errors
def pins() -> None:
    """List every pin with its download progress."""

    store = _ctx().store
    table = Table(title="Pins")
    table.add_column("Location")
    table.add_column("Name")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")
    table.add_column("Photos", justify="right")
    table.add_column("Status")
    for location in store.list_locations():
        album = store.get_album_for_location(location.id)
        if album is None:
            continue
        progress = store.progress(album.id)
        if album.no_results_found:
            status = "[yellow]no results"
        elif album.download_complete:
            status = "[green]complete"
        else:
            status = "[red]incomplete"
        table.add_row(
            location.id,
            location.display_name,
            f"{location.latitude:.4f}",
            f"{location.longitude:.4f}",
            f"{progress.downloaded}/{progress.total}",
            status,
        )
    console.print(table)


@app.command()
@_handle_errors
def show(location_id: str) -> None:
    """Print the album of a pin, newest URL first."""

    store = _ctx().store
    location = store.get_location(location_id)
    if location is None:
        raise LocationNotFoundError(location_id)
    album = store.get_album_for_location(location.id)
    if album is None:
        raise AlbumNotFoundError(f"Pin {location_id} has no album")
    progress = store.progress(album.id)
    table = Table(title=f"{location.display_name} ({progress.downloaded}/{progress.total})")
    table.add_column("Item")
    table.add_column("Title")
    table.add_column("URL")
    table.add_column("Bytes", justify="right")
    for item in store.photo_items(album.id):
        size = str(len(item.payload)) if item.payload is not None else "-"
        table.add_row(item.id, item.title, item.source_url, size)
    console.print(table)
    if album.no_results_found:
        print("[yellow]No photos were found at this location")
    elif album.needs_resume:
        print(f"[yellow]Download incomplete; run `pinalbum resume {location_id}`")


@app.command()
@_handle_errors
def resume(location_id: str) -> None:
    """Finish an interrupted download."""

    resp = _ctx().service.open_album(location_id)
    if not resp.success:
        _fail(resp.error)
    if resp.resumed is None:
        print(f"[green]Album {resp.album_id} needs no download")
        return
    with console.status("Downloading photos..."):
        outcome = resp.resumed.result()
    print(f"[green]Album {resp.album_id}: {outcome.value}")


@app.command()
@_handle_errors
def reload(album_id: str) -> None:
    """Discard an album's photos and run a fresh search."""

    resp = _ctx().service.reload_album(album_id)
    if not resp.success:
        _fail(resp.error)
    with console.status("Reloading album..."):
        outcome = resp.reload.result()
    print(f"[green]Album {album_id}: {outcome.value}")


@app.command()
@_handle_errors
def trash(album_id: str, item_ids: List[str]) -> None:
    """Delete individual photos from an album."""

    resp = _ctx().service.delete_photos(album_id, item_ids)
    if not resp.success:
        _fail(resp.error)
    print(f"[green]Deleted {resp.deleted_count} photos, {resp.remaining_count} left")


@app.command()
@_handle_errors
def remove(location_id: str) -> None:
    """Delete a pin together with its album."""

    resp = _ctx().service.delete_pin(location_id)
    if not resp.success:
        _fail(resp.error)
    print(f"[green]Removed pin {location_id}")


if __name__ == "__main__":  # pragma: no cover
    app()
