"""
Attachment Migrator - moves issue attachments to a permanent home.

This package scans GitHub issue comments for embedded images, downloads each
one once, optionally converts and compresses it, publishes it under a
content-addressed path in an assets repository, and rewrites the issue body
to point at the published copies.

Main entry point is the CLI via `attachment-migrator issue` command.

Example:
    $ attachment-migrator issue --config config.yaml --dry-run
"""

__all__ = [
    "__version__",
    "extract_references",
    "content_path",
    "FetchCache",
    "AttachmentMigrator",
]
__version__ = "0.1.0"

from .core.extractor import extract_references
from .core.naming import content_path
from .fetch.cache import FetchCache
from .pipeline import AttachmentMigrator
