"""
Run orchestration for the Attachment Migrator.

This module wires the collaborators together for a complete run:
1. Read the issue comments and join them into one text
2. Migrate every referenced attachment (see pipeline.py)
3. Post the rendered body to the issue (printed in dry run)
4. Optionally delete the comments that were read

It also exposes run_text_migration() for migrating arbitrary text without
an issue.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
from rich.console import Console

from .config import AppConfig, get_github_token, validate_config
from .core.types import MigrationResult
from .pipeline import AttachmentMigrator
from .publish.publisher import Publisher
from .store.base import ObjectStore
from .store.github import GitHubAPI, GitHubIssue, GitHubRepository, join_comment_bodies
from .utils.logging import log_event, setup_logging


def run_issue_migration(
    cfg: AppConfig,
    console: Console | None = None,
    log_dir: Path | None = None,
) -> MigrationResult:
    """Migrate the attachments of an issue's comments into its body.

    Args:
        cfg: Application configuration
        console: Rich console for dry run output (creates default if None)
        log_dir: Directory for the log file when file logging is enabled

    Returns:
        The MigrationResult of the run

    Raises:
        MigrationError: On any fatal condition
    """
    validate_config(cfg, require_issue=True)
    logger = setup_logging(cfg.logging, log_dir)
    return asyncio.run(_run_issue_async(cfg, console or Console(), logger))


def run_text_migration(
    text: str,
    cfg: AppConfig,
    log_dir: Path | None = None,
) -> MigrationResult:
    """Migrate the attachments referenced by a text.

    Args:
        text: Markdown/HTML text
        cfg: Application configuration
        log_dir: Directory for the log file when file logging is enabled

    Returns:
        The MigrationResult of the run
    """
    validate_config(cfg)
    logger = setup_logging(cfg.logging, log_dir)
    return asyncio.run(_run_text_async(text, cfg, logger))


def build_http_client(cfg: AppConfig) -> httpx.AsyncClient:
    """Create the shared HTTP client for downloads and API calls."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(cfg.fetch.timeout_seconds, connect=10.0),
        follow_redirects=True,
        trust_env=cfg.fetch.trust_env,
    )


def build_publisher(
    cfg: AppConfig,
    store: ObjectStore,
    logger: logging.Logger | None = None,
) -> Publisher:
    """Build the publisher for the configured destination."""
    return Publisher(
        store,
        cfg.destination,
        retry=cfg.retry,
        dry_run=cfg.dry_run,
        dry_run_root=cfg.dry_run_root,
        logger=logger,
    )


async def _run_text_async(text: str, cfg: AppConfig, logger: logging.Logger) -> MigrationResult:
    token = get_github_token(cfg.github)
    async with build_http_client(cfg) as client:
        api = GitHubAPI(client, cfg.github.api_url, token)
        store = GitHubRepository(
            api, cfg.destination.owner, cfg.destination.repo, cfg.destination.branch
        )
        migrator = AttachmentMigrator(cfg, client, build_publisher(cfg, store, logger), token, logger)
        return await migrator.migrate(text)


async def _run_issue_async(cfg: AppConfig, console: Console, logger: logging.Logger) -> MigrationResult:
    token = get_github_token(cfg.github)
    async with build_http_client(cfg) as client:
        api = GitHubAPI(client, cfg.github.api_url, token)
        issue = GitHubIssue(api, cfg.issue.owner, cfg.issue.repo, int(cfg.issue.number))
        store = GitHubRepository(
            api, cfg.destination.owner, cfg.destination.repo, cfg.destination.branch
        )

        comments = await issue.list_comments()
        text = join_comment_bodies(comments)
        log_event(
            logger,
            "Comments loaded",
            event="comments_loaded",
            issue=cfg.issue.number,
            comments=len(comments),
        )

        migrator = AttachmentMigrator(cfg, client, build_publisher(cfg, store, logger), token, logger)
        result = await migrator.migrate(text)

        if not result.mappings:
            log_event(
                logger,
                "No attachments found; issue left untouched",
                level=logging.WARNING,
                event="nothing_to_migrate",
                issue=cfg.issue.number,
            )
            return result

        body = result.body if cfg.issue.output_mode == "body" else result.text
        await _post_body(issue, body, cfg, console, logger)

        if cfg.issue.delete_after:
            await _delete_comments(issue, comments, cfg, logger)

        return result


async def _post_body(
    issue: GitHubIssue,
    body: str,
    cfg: AppConfig,
    console: Console,
    logger: logging.Logger,
) -> None:
    if cfg.dry_run:
        console.print(body, markup=False, highlight=False, soft_wrap=True)
        return
    await issue.update_body(body)
    log_event(logger, "Issue body updated", event="body_updated", issue=issue.number)


async def _delete_comments(
    issue: GitHubIssue,
    comments: list[dict],
    cfg: AppConfig,
    logger: logging.Logger,
) -> None:
    # Only the comments that were migrated; newer ones are left alone.
    for comment in comments:
        comment_id = comment["id"]
        if cfg.dry_run:
            log_event(
                logger,
                f"Comment {issue.comment_url(comment_id)} was supposed to be deleted unless DRY_RUN was set",
                event="comment_delete_skipped",
                comment_id=comment_id,
            )
            continue
        await issue.delete_comment(comment_id)
        log_event(logger, "Comment deleted", event="comment_deleted", comment_id=comment_id)
