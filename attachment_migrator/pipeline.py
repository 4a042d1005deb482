"""
Attachment migration pipeline.

For one text, the pipeline:
1. Extracts image references
2. Schedules one migration task per distinct URL (FetchCache)
3. Waits for all of them (join barrier)
4. Renders the replacement body and the rewritten text

Each migration task runs the per-URL chain:
own URL? -> download -> name -> already published? -> normalize ->
compress -> rename -> publish.

The first failing task aborts the whole run; nothing is rendered.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .config import AppConfig
from .core.extractor import extract_references, unique_urls
from .core.naming import content_path
from .core.types import MigrationResult
from .fetch.cache import FetchCache
from .fetch.fetcher import fetch_attachment
from .media.compressor import CompressionSettings, compress_payload
from .media.normalizer import normalize_format
from .output.renderer import build_mappings, render_body, rewrite_text
from .publish.publisher import Publisher
from .utils.logging import get_logger, log_event


class AttachmentMigrator:
    """Migrates every attachment referenced by a text.

    One instance can migrate several texts; each migrate() call gets its own
    FetchCache so no state leaks between runs.
    """

    def __init__(
        self,
        cfg: AppConfig,
        client: httpx.AsyncClient,
        publisher: Publisher,
        token: str | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize the migrator.

        Args:
            cfg: Application configuration
            client: Shared HTTP client used for downloads
            publisher: Publisher bound to the destination store
            token: GitHub token sent with github.com attachment downloads
            logger: Logger for events
        """
        self._cfg = cfg
        self._client = client
        self._publisher = publisher
        self._token = token
        self._logger = logger or get_logger("pipeline")
        self.last_worker_count = 0

    async def migrate(self, text: str) -> MigrationResult:
        """Migrate all attachments referenced by a text.

        Args:
            text: Free-form text (markdown and/or HTML)

        Returns:
            MigrationResult with mappings, rendered body and rewritten text

        Raises:
            MigrationError: On the first fatal failure of any reference
        """
        references = extract_references(text)
        log_event(
            self._logger,
            "Migration start",
            event="migration_start",
            references=len(references),
        )

        cache: FetchCache[str] = FetchCache(self.migrate_url)
        for url in unique_urls(references):
            cache.resolve(url)
        published = await cache.join()
        self.last_worker_count = cache.worker_count

        mappings = build_mappings(references, published)
        log_event(
            self._logger,
            "Migration complete",
            event="migration_complete",
            references=len(references),
            files=len(mappings),
        )
        return MigrationResult(
            references=references,
            mappings=mappings,
            body=render_body(mappings),
            text=rewrite_text(text, references, published),
        )

    async def migrate_url(self, url: str) -> str:
        """Migrate one attachment and return its published URL."""
        publisher = self._publisher
        directory = self._cfg.destination.directory or ""

        # Content migrated by an earlier run (or copied from another issue)
        if publisher.owns(url):
            log_event(
                self._logger,
                f"Skipped {url}, it is already published",
                event="reference_skipped",
                url=url,
            )
            return url

        payload = await fetch_attachment(
            self._client,
            url,
            user_agent=self._cfg.fetch.user_agent,
            token=self._token,
            logger=self._logger,
        )

        path = content_path(directory, url, payload.file_type)
        if await publisher.exists(path):
            log_event(self._logger, "Already published", event="already_published", url=url, path=path)
            return publisher.url_for(path)

        media = self._cfg.media
        payload = await asyncio.to_thread(normalize_format, payload, media.normalize_format, self._logger)
        if media.compress:
            settings = CompressionSettings.from_config(media)
            payload = await asyncio.to_thread(compress_payload, payload, settings, self._logger)

        # Normalization can change the type, so the extension is recomputed
        path = content_path(directory, url, payload.file_type)
        published = await publisher.publish(path, payload, f"Add {path}")
        return published.url
