"""
Attachment fetching and per-run deduplication.

This package handles HTTP downloads and the single-flight cache that
guarantees each distinct URL is processed once per run.
"""

from .fetcher import build_headers, fetch_attachment
from .cache import FetchCache

__all__ = [
    "build_headers",
    "fetch_attachment",
    "FetchCache",
]
