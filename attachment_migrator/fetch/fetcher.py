"""
Attachment downloading over HTTP.

Attachments are downloaded with a shared httpx.AsyncClient. The GitHub
token is only attached to github.com URLs (user attachments); any other
host gets an anonymous request so the token never leaks to third parties.
httpx drops the Authorization header itself when a redirect leaves the
original host.

Downloads are not retried: a failed download aborts the run.
"""

from __future__ import annotations

import logging

import httpx

from ..core.types import Payload
from ..errors import FetchError
from ..media.detect import detect_file_type
from ..utils.logging import log_event

GITHUB_HOST = "github.com"


def build_headers(url: str, user_agent: str, token: str | None = None) -> dict[str, str]:
    """Build request headers for an attachment URL.

    Args:
        url: The attachment URL
        user_agent: User-Agent header string
        token: GitHub token, only used for github.com URLs

    Returns:
        Header dictionary for the request
    """
    headers = {"User-Agent": user_agent}
    if token and _is_github(url):
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _is_github(url: str) -> bool:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme == "https" and parsed.host == GITHUB_HOST


async def fetch_attachment(
    client: httpx.AsyncClient,
    url: str,
    user_agent: str,
    token: str | None = None,
    logger: logging.Logger | None = None,
) -> Payload:
    """Download an attachment and detect its type.

    Args:
        client: Shared async HTTP client (should follow redirects)
        url: The attachment URL
        user_agent: User-Agent header string
        token: GitHub token for github.com attachments
        logger: Logger for events

    Returns:
        Payload with the downloaded bytes and detected FileType

    Raises:
        FetchError: On transport errors or non-success HTTP status
    """
    log_event(logger, "Fetch start", level=logging.DEBUG, event="fetch_start", url=url)
    try:
        resp = await client.get(url, headers=build_headers(url, user_agent, token))
    except httpx.HTTPError as exc:
        raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        raise FetchError(url, resp.reason_phrase or f"HTTP {resp.status_code}", resp.status_code)

    content_type = resp.headers.get("content-type")
    data = resp.content
    file_type = detect_file_type(data, content_type)
    log_event(
        logger,
        "Fetch done",
        level=logging.DEBUG,
        event="fetch_done",
        url=url,
        size=len(data),
        file_type=file_type.name,
    )
    return Payload(data=data, file_type=file_type, content_type=content_type)
