"""Encore CLI - Main entry point."""
import typer
from rich.console import Console
from rich.table import Table

from encore.cli import catalog

app = typer.Typer(
    name="encore",
    help="Encore - Song catalog and import tools",
    add_completion=True,
)

console = Console()

# Add subcommands
app.add_typer(catalog.app, name="catalog", help="Catalog commands")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stdout"),
):
    """Encore command line."""
    if verbose:
        from encore.logging_config import setup_logging
        setup_logging(level="debug")


@app.command()
def version():
    """Show version information."""
    from encore import __version__
    console.print(f"Encore v{__version__}")


@app.command()
def status():
    """Check system status."""
    from encore.config import settings

    table = Table(title="Encore Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")

    # Check database
    try:
        from sqlalchemy import text
        from encore.database import engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        table.add_row("Database", "Connected")
    except Exception as e:
        table.add_row("Database", f"[red]Error: {e}[/red]")

    # Check cache
    if settings.redis_url:
        try:
            from encore.services.cache import get_cache
            get_cache().ping()
            table.add_row("Cache", "Redis connected")
        except Exception as e:
            table.add_row("Cache", f"[red]Error: {e}[/red]")
    else:
        table.add_row("Cache", "[yellow]In-process (REDIS_URL not set)[/yellow]")

    # Check Spotify credentials
    if settings.spotify_client_id and settings.spotify_client_secret:
        table.add_row("Spotify", "Configured")
    else:
        table.add_row("Spotify", "[yellow]Not configured[/yellow]")

    console.print(table)


if __name__ == "__main__":
    app()
