"""
Idempotent publishing of payloads to the destination store.

The publisher owns the check-then-write decision for each content-addressed
path. Publishing the same path twice never creates two objects: the second
call finds the object and returns its URL without uploading.

Order of checks in publish():
1. Destination archived? Fatal (checked once per run)
2. Object already at the path? Return its URL
3. Upload, retrying up to RetryPolicy.max_attempts times
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..config import DestinationConfig, RetryPolicy
from ..core.types import Payload, PublishedObject
from ..errors import ArchivedRepositoryError, PublishError, StoreError
from ..store.base import Committer, ObjectStore
from ..utils.logging import log_event


class Publisher:
    """Publishes payloads under content-addressed paths.

    In dry run, reads (archival state, existence) still go to the store but
    uploads are replaced by writes under dry_run_root, and the returned URL
    is the relative ``./path``.
    """

    def __init__(
        self,
        store: ObjectStore,
        destination: DestinationConfig,
        retry: RetryPolicy | None = None,
        dry_run: bool = False,
        dry_run_root: Path | str = ".",
        logger: logging.Logger | None = None,
    ):
        self._store = store
        self._destination = destination
        self._retry = retry or RetryPolicy()
        self._dry_run = dry_run
        self._dry_run_root = Path(dry_run_root)
        self._logger = logger
        self._writable: asyncio.Task[None] | None = None
        self.upload_count = 0

    @property
    def base_url(self) -> str:
        return self._destination.published_base_url

    def url_for(self, path: str) -> str:
        """Public URL of an object path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def owns(self, url: str) -> bool:
        """True if the URL already points into the published namespace."""
        return url.startswith(self.base_url)

    async def ensure_writable(self) -> None:
        """Fail if the destination is archived.

        The metadata lookup runs once per publisher; concurrent callers share it.

        Raises:
            ArchivedRepositoryError: If the destination is archived
            StoreError: If the metadata cannot be read
        """
        if self._writable is None:
            self._writable = asyncio.create_task(self._check_archived())
        await self._writable

    async def _check_archived(self) -> None:
        metadata = await self._store.get_metadata()
        if metadata.get("archived"):
            raise ArchivedRepositoryError(self._destination.repository or "destination")

    async def exists(self, path: str) -> bool:
        """Check for an object at a path.

        A store error other than "not found" is logged and treated as absent;
        the upload that follows then succeeds or fails on its own.
        """
        try:
            return await self._store.get_object(path)
        except StoreError as exc:
            log_event(
                self._logger,
                "Existence check failed, assuming absent",
                level=logging.WARNING,
                event="exists_check_failed",
                path=path,
                error=str(exc),
            )
            return False

    async def publish(self, path: str, payload: Payload, message: str) -> PublishedObject:
        """Publish a payload at a path unless an object is already there.

        Args:
            path: Content-addressed destination path
            payload: Final (post-transform) payload
            message: Commit message

        Returns:
            PublishedObject describing where the payload lives

        Raises:
            ArchivedRepositoryError: If the destination is archived
            PublishError: If every upload attempt failed
        """
        await self.ensure_writable()

        if await self.exists(path):
            log_event(
                self._logger,
                "Already published",
                event="already_published",
                path=path,
            )
            return PublishedObject(path=path, url=self.url_for(path), existed_before_run=True)

        if self._dry_run:
            return self._write_local(path, payload)

        await self._upload(path, payload, message)
        log_event(self._logger, "Published", event="published", path=path, size=payload.size)
        return PublishedObject(path=path, url=self.url_for(path), existed_before_run=False)

    async def _upload(self, path: str, payload: Payload, message: str) -> None:
        committer = Committer(
            name=self._destination.committer_name or "",
            email=self._destination.committer_email or "",
        )
        last_error: str | None = None
        for attempt in range(1, self._retry.max_attempts + 1):
            self.upload_count += 1
            try:
                await self._store.put_object(path, payload.data, message, committer)
                return
            except StoreError as exc:
                last_error = str(exc)
                final = attempt == self._retry.max_attempts
                log_event(
                    self._logger,
                    (
                        f"The attempt #{attempt} has failed. No more attempts will be made."
                        if final
                        else f"The attempt #{attempt} has failed. Move on to the next attempt."
                    ),
                    level=logging.ERROR,
                    event="publish_attempt_failed",
                    path=path,
                    attempt=attempt,
                    error=last_error,
                )
                if final:
                    raise PublishError(path, attempt, last_error) from exc
                delay = self._retry.delay_for(attempt)
                if delay > 0:
                    await asyncio.sleep(delay)

    def _write_local(self, path: str, payload: Payload) -> PublishedObject:
        target = self._dry_run_root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload.data)
        log_event(
            self._logger,
            f"File {path} written",
            event="dry_run_write",
            path=str(target),
            size=payload.size,
        )
        return PublishedObject(path=path, url=f"./{path}", existed_before_run=False)
