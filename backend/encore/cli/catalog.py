"""Encore CLI - Catalog commands."""
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer()
console = Console()


def get_db_session():
    """Open a database session for a CLI command."""
    from encore.database import SessionLocal
    return SessionLocal()


def _format_duration(seconds) -> str:
    if seconds is None:
        return ""
    return f"{seconds // 60}:{seconds % 60:02d}"


@app.command("import-csv")
def import_csv(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="CSV file"),
    actor: str = typer.Option(..., "--actor", "-a", help="Actor ID recorded as the csv source"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Parse and validate only"),
):
    """Import songs from a CSV file (columns: title, artist, album, duration, genre)."""
    from encore.services.csv_parser import parse_csv

    result = parse_csv(file.read_text(encoding="utf-8"))
    if not result.success:
        for error in result.errors:
            console.print(f"[red]{error.message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"Parsed {result.total_rows} rows: "
        f"[green]{result.valid_rows} valid[/green], [yellow]{result.invalid_rows} invalid[/yellow]"
    )

    if dry_run:
        for error in result.errors:
            console.print(f"  Row {error.row}: {error.message}")
        return

    db = get_db_session()
    try:
        from encore.services.import_service import CSVImportService

        response = CSVImportService(db).commit_rows(result.songs, actor)

        console.print(
            f"[green]Inserted {response.inserted}[/green], "
            f"updated {response.updated}, "
            f"[yellow]{len(response.errors)} errors[/yellow]"
        )
        for error in response.errors:
            console.print(f"  Row {error.row}: {error.message}")
    finally:
        db.close()


@app.command()
def search(
    query: str = typer.Argument(..., help="Title, artist or album text"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum results"),
):
    """Search the catalog."""
    db = get_db_session()
    try:
        from encore.services.search import CatalogSearchService

        response = CatalogSearchService(db).search(query, limit=limit)

        if not response.songs:
            console.print(f"[yellow]No songs match '{query}'[/yellow]")
            return

        table = Table(title=f"Songs matching '{query}'")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Artist")
        table.add_column("Album")
        table.add_column("Duration", justify="right")

        for song in response.songs:
            table.add_row(
                str(song.id),
                song.title,
                song.artist_name,
                song.album_title or "",
                _format_duration(song.duration_sec),
            )

        console.print(table)
    finally:
        db.close()


@app.command()
def duplicates(
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum groups"),
):
    """List songs split across neighbouring duration buckets."""
    db = get_db_session()
    try:
        from encore.services.catalog import CatalogService

        groups = CatalogService(db).find_split_songs(limit)

        if not groups:
            console.print("[green]No split songs found[/green]")
            return

        table = Table(title="Split songs")
        table.add_column("Artist", style="cyan")
        table.add_column("Title")
        table.add_column("Songs", justify="right")
        table.add_column("Durations")

        for group in groups:
            table.add_row(
                group["artist_name"],
                group["title_norm"],
                str(group["count"]),
                ", ".join(_format_duration(s.duration_sec) or "-" for s in group["songs"]),
            )

        console.print(table)
    finally:
        db.close()
