"""CLI entry point for mimimatch.

Subcommands:
  - swipe: Interactive picker (TUI)
  - shortlist / export: Show the kept names
  - progress: Seen/total counter for the current category
  - settings: Show or change surname and category
  - remove / reset: Edit the decisions
  - names: Dataset summary per category
"""

from __future__ import annotations

import logging
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from mimimatch.config import AppConfig, load_config
from mimimatch.dataset import DatasetError, count_by_category
from mimimatch.schemas import Category
from mimimatch.session import CurationSession, open_session

app = typer.Typer(
    name="mimimatch",
    help="Pick a baby name by swiping through a name list.",
    no_args_is_help=True,
)

console = Console()

_LOG_FMT = "%(name)s %(levelname)s: %(message)s"

_CATEGORY_LABELS = {
    Category.BOY: "Kluk",
    Category.GIRL: "Holka",
    Category.NEUTRAL: "Obojí",
}

_CONFIG_OPTION = typer.Option(None, "--config", help="Path to config YAML file")
_DATA_DIR_OPTION = typer.Option(
    None, "--data-dir", help="Directory for saved settings and decisions"
)
_DATASET_OPTION = typer.Option(None, "--dataset", help="Path to a names YAML file")
_VERBOSE_OPTION = typer.Option(False, "--verbose", help="Enable debug logging")


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FMT)


def _build_config(
    *,
    config_path: str | None,
    data_dir: str | None,
    dataset: str | None,
) -> AppConfig:
    """Build AppConfig from base config + CLI overrides."""
    base = load_config(config_path)

    overrides: dict[str, Any] = {}
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    if dataset is not None:
        overrides["dataset_path"] = dataset

    if not overrides:
        return base

    return base.model_copy(update=overrides)


def _load(
    config_path: str | None, data_dir: str | None, dataset: str | None
) -> CurationSession:
    """Build config and open the session, exiting with code 1 on errors."""
    try:
        config = _build_config(
            config_path=config_path, data_dir=data_dir, dataset=dataset
        )
        session = open_session(config)
    except (FileNotFoundError, DatasetError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e
    return session


def _print_shortlist(session: CurationSession) -> None:
    kept = session.kept
    if not kept:
        console.print("[dim]Zatím jste nevybrali žádná jména.[/dim]")
        return

    table = Table(title=f"Můj výběr ({len(kept)})", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Jméno", style="bold")
    for i, name in enumerate(kept, start=1):
        table.add_row(str(i), session.shortlist_name(name))
    console.print(table)


@app.command()
def swipe(
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    skip_settings: bool = typer.Option(
        False, "--skip-settings", help="Start on the name card instead of settings"
    ),
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Swipe through names in the interactive picker."""
    _setup_logging(verbose)

    try:
        config = _build_config(
            config_path=config_path, data_dir=data_dir, dataset=dataset
        )
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    from mimimatch.tui import launch_swipe

    try:
        kept = launch_swipe(config, show_settings=not skip_settings)
    except (FileNotFoundError, DatasetError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Uloženo:[/green] {len(kept)} vybraných jmen")


@app.command()
def shortlist(
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Show the kept names."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        _print_shortlist(session)
    finally:
        session.close()


@app.command()
def export(
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Print the shortlist as plain text, one full name per line."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        text = session.shortlist_text()
    finally:
        session.close()
    if text:
        typer.echo(text)


@app.command()
def progress(
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Show how many names of the current category were already decided."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        counts = session.progress
        category = session.preferences.category
    finally:
        session.close()

    table = Table(title="Progress", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Category", _CATEGORY_LABELS[category])
    table.add_row("Seen", f"{counts.seen} z {counts.total}")
    table.add_row("Remaining", str(counts.remaining))
    console.print(table)

    if counts.remaining == 0:
        console.print(
            "[yellow]Prošli jste všechna jména v této kategorii.[/yellow] "
            "Run [bold]mimimatch reset[/bold] to start over."
        )


@app.command()
def settings(
    surname: str | None = typer.Option(None, "--surname", help="Family surname"),
    category: Category | None = typer.Option(  # noqa: B008
        None, "--category", help="Name category filter"
    ),
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Show or change the surname and the category filter."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        if surname is not None:
            session.set_surname(surname)
        if category is not None:
            session.set_category(category)
        prefs = session.preferences
    finally:
        session.close()

    table = Table(title="Nastavení", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Příjmení", prefs.surname or "[dim](none)[/dim]")
    table.add_row("Pohlaví", f"{_CATEGORY_LABELS[prefs.category]} ({prefs.category.value})")
    console.print(table)


@app.command()
def remove(
    name: str = typer.Argument(..., help="Name to remove from the shortlist"),
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Remove a name from the shortlist so it shows up again."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        was_decided = session.decisions.is_decided(name)
        session.remove(name)
    finally:
        session.close()

    if was_decided:
        console.print(f"[green]Removed:[/green] {name}")
    else:
        console.print(f"[yellow]Not on the list:[/yellow] {name}")


@app.command()
def reset(
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Forget every kept and seen name."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        session.reset_all()
    finally:
        session.close()
    console.print("[yellow]All decisions cleared.[/yellow]")


@app.command()
def names(
    config_path: str | None = _CONFIG_OPTION,
    data_dir: str | None = _DATA_DIR_OPTION,
    dataset: str | None = _DATASET_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Summarize the name dataset per category."""
    _setup_logging(verbose)
    session = _load(config_path, data_dir, dataset)
    try:
        counts = count_by_category(session.dataset)
    finally:
        session.close()

    table = Table(title="Names", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for category, count in counts.items():
        table.add_row(f"{_CATEGORY_LABELS[category]} ({category.value})", str(count))
    table.add_row("Total", str(sum(counts.values())), style="bold")
    console.print(table)
