from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer

from catalog_import.config import get_settings
from catalog_import.decoders import decoder_for_path, read_legacy_text
from catalog_import.errors import SourceFileError
from catalog_import.infrastructure.db_factory import get_sync_connection
from catalog_import.infrastructure.store import PostgresCatalogStore
from catalog_import.orchestrator import run_import
from catalog_import.reporter import print_report, print_stats
from catalog_import.utils.logging import configure_logging

app = typer.Typer(help="Import legacy catalog files (.lst/.pos) into PostgreSQL.")


def _configure() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"source={settings.import_source_dir} encoding={settings.import_source_encoding} "
        f"batch={settings.import_batch_size}"
    )


@app.command()
def run(
    source_dir: Optional[Path] = typer.Option(
        None,
        "--source-dir",
        "-d",
        help="Directory with .lst/.pos files (default from settings).",
    ),
    clean: bool = typer.Option(
        False,
        "--clean",
        help="Delete previously imported categories and positions first.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Decode only; do not touch the database.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the report as JSON instead of tables.",
    ),
    no_persist: bool = typer.Option(
        False,
        "--no-persist",
        help="Do not write the report to the results directory.",
    ),
) -> None:
    """
    Import all category files, then all position files.
    """
    _configure()
    try:
        report = run_import(
            source_dir=source_dir,
            clean=clean,
            dry_run=dry_run,
            persist=not no_persist,
        )
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(report, indent=2, ensure_ascii=False, default=str))
    else:
        print_report(report)


@app.command()
def parse(
    path: Path = typer.Argument(..., help="A single .lst or .pos file."),
) -> None:
    """
    Decode one file and print its records as JSON (no database).
    """
    _configure()
    decoder = decoder_for_path(path)
    if decoder is None:
        typer.echo(f"Unsupported file type: {path.suffix or path.name}", err=True)
        raise typer.Exit(code=2)
    try:
        text = read_legacy_text(path)
    except SourceFileError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    records = decoder.decode(text, path.name)
    typer.echo(
        json.dumps(
            [r.model_dump(mode="json", exclude_none=True) for r in records],
            indent=2,
            ensure_ascii=False,
        )
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the catalog tables and indexes if they do not exist yet.
    """
    _configure()
    with get_sync_connection() as conn:
        PostgresCatalogStore(conn).ensure_schema()
    typer.echo("Catalog schema is up to date.")


@app.command()
def stats() -> None:
    """
    Show row counts of the imported catalog.
    """
    _configure()
    with get_sync_connection() as conn:
        print_stats(PostgresCatalogStore(conn).stats())


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
