"""
Abstract base class for destination stores.

New stores should inherit from ObjectStore and implement the existence
check, the upload and the metadata lookup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Committer:
    """Identity recorded as author and committer of uploads."""
    name: str
    email: str


class ObjectStore(ABC):
    """Abstract base class for the remote object store.

    Paths are relative to the store root and use forward slashes.
    """

    @abstractmethod
    async def get_object(self, path: str) -> bool:
        """Check whether an object exists at a path.

        Args:
            path: Object path inside the store

        Returns:
            True if found, False if not found

        Raises:
            StoreError: On any answer other than found/not found
        """
        raise NotImplementedError

    @abstractmethod
    async def put_object(self, path: str, data: bytes, message: str, committer: Committer) -> None:
        """Create a new object.

        Args:
            path: Object path inside the store
            data: Object content
            message: Commit message
            committer: Author and committer identity

        Raises:
            StoreError: If the store rejects the write
        """
        raise NotImplementedError

    @abstractmethod
    async def get_metadata(self) -> dict[str, Any]:
        """Return store metadata; must carry an ``archived`` flag."""
        raise NotImplementedError
