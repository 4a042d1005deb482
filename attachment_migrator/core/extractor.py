"""
Embedded image extraction from free-form text.

Two surface forms are recognized, each carrying an http(s) URL:
- markdown images: ![alt](https://example.com/a.png)
- HTML image tags: <img src="https://example.com/a.png">

This is a textual heuristic, not a markdown parse. A match touching a
backtick on either side is treated as a quoted example and skipped, but a
reference inside a longer backticked span such as
`hello ![foo](https://example.com) world` is still picked up.
"""

from __future__ import annotations

import re

from .types import Reference

# An <img> tag with "exclude" after its src on the same line is opted out
# of migration (e.g. <img src="..." class="exclude">).
_REFERENCE_RE = re.compile(
    r"(?<!`)"
    r"(?:!\[.*?\]\((?P<markdown>https?://[^\s)]+)\)"
    r"|<img.*?src=\"(?P<html>https?://[^\s\"]+)\"(?!.*exclude).*>)"
    r"(?!`)"
)


def extract_references(text: str) -> list[Reference]:
    """Find embedded image references in document order.

    Duplicated URLs are kept (one Reference per occurrence); callers that
    need each URL once use unique_urls().

    Args:
        text: The document to scan

    Returns:
        List of Reference objects ordered by position in the text
    """
    references: list[Reference] = []
    for match in _REFERENCE_RE.finditer(text):
        group = "markdown" if match.group("markdown") else "html"
        url = match.group(group)
        references.append(
            Reference(
                original_text=match.group(0),
                url=url,
                start=match.start(),
                end=match.end(),
                url_offset=match.start(group) - match.start(),
            )
        )
    return references


def unique_urls(references: list[Reference]) -> list[str]:
    """Return each referenced URL once, in first-occurrence order."""
    seen: set[str] = set()
    urls: list[str] = []
    for reference in references:
        if reference.url in seen:
            continue
        seen.add(reference.url)
        urls.append(reference.url)
    return urls
