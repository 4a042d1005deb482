"""
GitHub REST API collaborators.

This module provides the two GitHub-backed collaborators of the pipeline:
1. GitHubRepository: the destination object store (contents API)
2. GitHubIssue: the comment thread the text is read from and written to

Both share one GitHubAPI wrapper around an httpx.AsyncClient. Any answer
other than the expected ones is raised as StoreError; retry decisions are
left to the callers.
"""

from __future__ import annotations

import base64
from typing import Any
from urllib.parse import quote

import httpx

from ..errors import StoreError
from .base import Committer, ObjectStore

API_VERSION = "2022-11-28"
COMMENTS_PER_PAGE = 100


class GitHubAPI:
    """Minimal authenticated GitHub REST client."""

    def __init__(self, client: httpx.AsyncClient, api_url: str, token: str | None = None):
        self._client = client
        self._api_url = api_url.rstrip("/")
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def request(self, method: str, route: str, **kwargs: Any) -> httpx.Response:
        """Send a request to the API.

        Args:
            method: HTTP method
            route: Path below the API root, starting with "/"
            **kwargs: Forwarded to httpx (params, json, ...)

        Returns:
            The response, whatever its status

        Raises:
            StoreError: On transport errors
        """
        url = f"{self._api_url}{route}"
        try:
            return await self._client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {route} failed: {type(exc).__name__}: {exc}") from exc


def _raise_for_status(resp: httpx.Response, action: str) -> None:
    if resp.is_success:
        return
    message = resp.text[:200]
    try:
        message = resp.json().get("message", message)
    except ValueError:
        pass
    raise StoreError(f"{action} failed: HTTP {resp.status_code} {message}", resp.status_code)


class GitHubRepository(ObjectStore):
    """Repository contents used as a write-once object store."""

    def __init__(self, api: GitHubAPI, owner: str, repo: str, branch: str | None = None):
        self._api = api
        self.owner = owner
        self.repo = repo
        self.branch = branch

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _contents_route(self, path: str) -> str:
        return f"/repos/{self.owner}/{self.repo}/contents/{quote(path.lstrip('/'))}"

    async def get_object(self, path: str) -> bool:
        params = {"ref": self.branch} if self.branch else None
        resp = await self._api.request("GET", self._contents_route(path), params=params)
        if resp.status_code == 404:
            return False
        _raise_for_status(resp, f"Reading {self.full_name}/{path}")
        return True

    async def put_object(self, path: str, data: bytes, message: str, committer: Committer) -> None:
        identity = {"name": committer.name, "email": committer.email}
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(data).decode("ascii"),
            "committer": identity,
            "author": identity,
        }
        # No "sha": objects are only ever created, never updated.
        if self.branch:
            body["branch"] = self.branch
        resp = await self._api.request("PUT", self._contents_route(path), json=body)
        _raise_for_status(resp, f"Writing {self.full_name}/{path}")

    async def get_metadata(self) -> dict[str, Any]:
        resp = await self._api.request("GET", f"/repos/{self.owner}/{self.repo}")
        _raise_for_status(resp, f"Reading repository info of {self.full_name}")
        return resp.json()


class GitHubIssue:
    """An issue whose comments carry the attachments to migrate."""

    def __init__(self, api: GitHubAPI, owner: str, repo: str, number: int):
        self._api = api
        self.owner = owner
        self.repo = repo
        self.number = number

    def comment_url(self, comment_id: int) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/issues/{self.number}#issuecomment-{comment_id}"

    async def list_comments(self) -> list[dict[str, Any]]:
        """Fetch every comment of the issue, following pagination."""
        comments: list[dict[str, Any]] = []
        page = 1
        while True:
            resp = await self._api.request(
                "GET",
                f"/repos/{self.owner}/{self.repo}/issues/{self.number}/comments",
                params={"page": page, "per_page": COMMENTS_PER_PAGE},
            )
            _raise_for_status(resp, f"Listing comments of issue #{self.number}")
            data = resp.json()
            comments.extend(data)
            if len(data) < COMMENTS_PER_PAGE:
                return comments
            page += 1

    async def update_body(self, body: str) -> None:
        resp = await self._api.request(
            "PATCH",
            f"/repos/{self.owner}/{self.repo}/issues/{self.number}",
            json={"body": body},
        )
        _raise_for_status(resp, f"Updating issue #{self.number}")

    async def delete_comment(self, comment_id: int) -> None:
        resp = await self._api.request(
            "DELETE",
            f"/repos/{self.owner}/{self.repo}/issues/comments/{comment_id}",
        )
        _raise_for_status(resp, f"Deleting comment {comment_id}")


def join_comment_bodies(comments: list[dict[str, Any]]) -> str:
    """Concatenate comment bodies into one text, one comment per line block."""
    return "\n".join(comment.get("body") or "" for comment in comments)
