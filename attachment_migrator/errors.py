"""
Exception hierarchy for the migration pipeline.

Every fatal condition raises a subclass of MigrationError so the CLI can
report it and exit without a traceback. Non-fatal conditions (unknown file
type, compression that never reaches the budget) are not errors at all.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base class for errors that abort a migration run."""


class ConfigError(MigrationError):
    """A required option is missing or has an invalid value."""


class FetchError(MigrationError):
    """An attachment could not be downloaded."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch attached file {url}: {reason}")


class StoreError(MigrationError):
    """The remote store answered a request with an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ArchivedRepositoryError(MigrationError):
    """The destination repository is archived and cannot accept uploads."""

    def __init__(self, repository: str):
        self.repository = repository
        super().__init__(f"{repository} is archived.")


class PublishError(MigrationError):
    """Uploading an object failed on every allowed attempt."""

    def __init__(self, path: str, attempts: int, last_error: str | None = None):
        self.path = path
        self.attempts = attempts
        self.last_error = last_error
        message = f"Publishing {path} failed after {attempts} attempts; no more attempts will be made"
        if last_error:
            message = f"{message} (last error: {last_error})"
        super().__init__(message)
