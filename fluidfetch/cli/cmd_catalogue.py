# -*- coding: utf-8 -*-
"""
fluids catalogue - local substance catalogue

Commands:
- fluids catalogue show [--renew]    - list available substances (IDs)
- fluids catalogue refresh [--force] - refresh the catalogue if stale
- fluids catalogue find NAME          - look up IDs by (partial) name
"""

from datetime import timedelta
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fluidfetch.catalogue import CatalogueCache, RefreshResult
from fluidfetch.config import FluidsSettings, load_settings
from fluidfetch.connectors import WebBookClient
from fluidfetch.exceptions import FluidsException, ResolutionError

app = typer.Typer(
    help="Show, refresh and search the substance catalogue",
    no_args_is_help=True
)
console = Console()


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error! {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _settings(ctx: typer.Context) -> FluidsSettings:
    if ctx.obj is None:
        ctx.obj = load_settings()
    return ctx.obj


def _cache(settings: FluidsSettings, client: WebBookClient) -> CatalogueCache:
    return CatalogueCache(
        settings.catalogue_path,
        client=client,
        max_age=timedelta(seconds=settings.catalogue_max_age),
    )


def _report(result: RefreshResult) -> None:
    if result.refreshed:
        console.print(f" -> {result.reason}: catalogue renewed with {result.entry_count} substances")
    else:
        console.print(
            f" -> catalogue file is {result.age_days:.2f} days "
            f"({result.age.total_seconds():.0f} sec.) old"
        )


@app.command()
def show(
    ctx: typer.Context,
    renew: bool = typer.Option(False, "--renew", "-R", help="Force a catalogue renewal first"),
):
    """Print the catalogue of available substances (NIST IDs)"""
    settings = _settings(ctx)
    with WebBookClient(settings) as client:
        cache = _cache(settings, client)
        try:
            _report(cache.refresh(force=renew))
            entries = cache.entries()
        except FluidsException as e:
            _fail(e)

    console.print(" -> available (IDs) fluids @ NIST Chemistry WebBook:")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Substance")
    for entry in entries:
        table.add_row(entry.substance_id, escape(entry.name))
    console.print(table)
    console.print(f"\nTotal: {len(entries)} substances")


@app.command()
def refresh(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Refresh even if the catalogue is current"),
):
    """Refresh the catalogue when it is older than the configured maximum age"""
    settings = _settings(ctx)
    with WebBookClient(settings) as client:
        try:
            _report(_cache(settings, client).refresh(force=force))
        except FluidsException as e:
            _fail(e)


@app.command()
def find(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Substance name or part of it (case-sensitive)"),
):
    """Find substance IDs by name"""
    settings = _settings(ctx)
    with WebBookClient(settings) as client:
        cache = _cache(settings, client)
        try:
            cache.refresh()
            matches = cache.lookup_all(name, field="name")
            if not matches:
                raise ResolutionError(f"No substance matching '{name}' in the catalogue", substance=name)
        except FluidsException as e:
            _fail(e)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Substance")
    for entry in matches:
        table.add_row(entry.substance_id, escape(entry.name))
    console.print(table)
