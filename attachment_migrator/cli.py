"""
Command-line interface for the Attachment Migrator.

Uses Typer to provide commands for migrating an issue's comments or a local
markdown file. Configuration comes from an optional YAML file, then the
workflow environment variables, then the command-line options. Supports
loading .env files for tokens.
"""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .config import AppConfig, apply_env_overrides, load_config
from .errors import MigrationError
from .runner import run_issue_migration, run_text_migration

app = typer.Typer(add_completion=False)
console = Console()
err_console = Console(stderr=True)


def _load(config: Path | None, dry_run: bool | None, log_level: str | None, log_file: bool | None) -> AppConfig:
    # Load environment variables from .env if available
    load_dotenv()

    cfg = load_config(str(config) if config else None)
    apply_env_overrides(cfg)

    if dry_run is not None:
        cfg.dry_run = dry_run
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file
    return cfg


@app.command()
def issue(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Write files locally and print the body instead of posting."
    ),
    delete_after: bool | None = typer.Option(
        None, "--delete-after/--keep-comments", help="Delete the source comments after posting."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    log_dir: Path = typer.Option(Path("."), "--log-dir", help="Directory for the log file."),
):
    """Migrate the attachments in an issue's comments into its body.

    The issue and destination are read from ISSUE_REPO, ISSUE_NUMBER,
    ASSETS_REPO and ASSETS_DIRECTORY (or the YAML config).

    Args:
        config: Optional path to YAML config file
        dry_run: Override DRY_RUN
        delete_after: Override DELETE_AFTER
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Enable/disable file logging
        log_dir: Directory for the log file
    """
    try:
        cfg = _load(config, dry_run, log_level, log_file)
        if delete_after is not None:
            cfg.issue.delete_after = delete_after
        result = run_issue_migration(cfg, console=console, log_dir=log_dir)
    except MigrationError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    console.print(f"Migrated {len(result.mappings)} file(s)")


@app.command()
def file(
    input: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout."),
    mode: str = typer.Option("rewrite", "--mode", help="Output: rewrite (source text) or body (file blocks)."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    dry_run: bool | None = typer.Option(None, "--dry-run/--no-dry-run"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Migrate the attachments referenced by a local markdown file.

    Args:
        input: Markdown/HTML file to scan
        output: Optional output path (stdout if omitted)
        mode: "rewrite" for the source with new URLs, "body" for file blocks
        config: Optional path to YAML config file
        dry_run: Override DRY_RUN
        log_level: Logging level
        log_file: Enable/disable file logging
    """
    if mode not in ("rewrite", "body"):
        raise typer.BadParameter("mode must be 'rewrite' or 'body'", param_hint="--mode")

    text = input.read_text(encoding="utf-8")
    log_dir = output.parent if output else Path(".")

    try:
        cfg = _load(config, dry_run, log_level, log_file)
        result = run_text_migration(text, cfg, log_dir=log_dir)
    except MigrationError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    rendered = result.text if mode == "rewrite" else result.body
    if output is None:
        console.print(rendered, markup=False, highlight=False, soft_wrap=True)
        return
    output.write_text(rendered, encoding="utf-8")
    console.print(f"Migrated {len(result.mappings)} file(s): {output}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
