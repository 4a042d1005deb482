"""Shared fixtures: in-memory images and a fake destination store."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from attachment_migrator.errors import StoreError
from attachment_migrator.store.base import Committer, ObjectStore


class FakeStore(ObjectStore):
    """In-memory object store recording every call."""

    def __init__(self, objects=None, archived=False, failures=0):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.archived = archived
        self.failures = failures
        self.get_calls: list[str] = []
        self.put_calls: list[str] = []
        self.commits: list[tuple[str, Committer]] = []
        self.metadata_calls = 0

    async def get_object(self, path: str) -> bool:
        self.get_calls.append(path)
        return path in self.objects

    async def put_object(self, path: str, data: bytes, message: str, committer: Committer) -> None:
        self.put_calls.append(path)
        if self.failures:
            self.failures -= 1
            raise StoreError("Writing failed: HTTP 502 Bad Gateway", 502)
        self.objects[path] = data
        self.commits.append((message, committer))

    async def get_metadata(self) -> dict:
        self.metadata_calls += 1
        return {"archived": self.archived}


def _noise(size: tuple[int, int], mode: str) -> Image.Image:
    bands = [Image.effect_noise(size, 100) for _ in range(len(mode))]
    return Image.merge(mode, bands)


@pytest.fixture
def make_image():
    """Return a factory producing encoded images.

    noise=True yields incompressible content so sizes shrink visibly with
    lower quality; noise=False yields a flat color.
    """

    def _make(fmt: str = "PNG", size: tuple[int, int] = (64, 64), noise: bool = True, mode: str = "RGB", **params) -> bytes:
        if noise:
            image = _noise(size, mode)
        else:
            image = Image.new(mode, size, (200, 30, 30, 255)[: len(mode)])
        output = io.BytesIO()
        image.save(output, format=fmt, **params)
        return output.getvalue()

    return _make


@pytest.fixture
def store():
    return FakeStore()
