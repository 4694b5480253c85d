"""
Command-line interface for the FCV news scraper.

Uses Typer to provide a CLI with options for the main configuration
settings. Supports loading .env files for API key configuration.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console

from .config import load_config
from .llm.tracing import flush
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main() -> None:
    """Scrape FCV news articles and enrich them with LLM summaries and tags."""


@app.command()
def run(
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    ids: list[int] | None = typer.Option(
        None, "--id", help="Article ID to fetch (repeatable). Defaults to the configured IDs."
    ),
    max_pages: int | None = typer.Option(
        None, "--max-pages", min=1, help="Maximum number of browser tabs open at once."
    ),
    timezone: str | None = typer.Option(
        None, "--timezone", help="IANA time zone of the site's publish dates."
    ),
    output_format: str | None = typer.Option(
        None, "--format", help="Output format: json or jsonl."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Override provider API key (otherwise read from provider.api_key_env).",
    ),
):
    """Run the scraping pipeline.

    Fetches every configured article page, generates summaries and tags
    through the LLM provider, and writes the assembled records.

    Args:
        output: Directory for the result file and logs
        config: Optional path to YAML config file
        ids: Article IDs overriding the configured list
        max_pages: Maximum concurrent browser tabs
        timezone: Time zone used to normalize publish dates
        output_format: Result file format (json, jsonl)
        progress: Whether to show progress bar
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Enable/disable file logging
        api_key: Override LLM provider API key
    """
    # Load environment variables from .env if available
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    # Override with CLI options
    if api_key:
        cfg.provider.api_key = api_key
    if ids:
        cfg.fetch.ids = list(ids)
    if max_pages is not None:
        cfg.fetch.max_concurrent_pages = max_pages
    if timezone:
        cfg.dates.timezone = timezone
    if output_format:
        cfg.output.format = output_format
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        result = run_pipeline(cfg, output, show_progress=progress, console=console)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        # Flush Langfuse traces before exit
        flush()

    console.print(f"{len(result.articles)} articles written to {result.output_path}")


if __name__ == "__main__":
    app()
