"""
Rendering of migration results.

render_body() produces the replacement issue body: one block per migrated
file with a preview table and a copy-pasteable embed snippet, rendered from
a Jinja2 template. rewrite_text() instead keeps the source text and swaps
each reference URL for its published one.

Both are pure functions of their input.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..core.extractor import unique_urls
from ..core.types import Reference, ReplacementMapping

_ENV = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
    autoescape=False,
    trim_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


def build_mappings(references: list[Reference], published: dict[str, str]) -> list[ReplacementMapping]:
    """Build one mapping per unique URL, in first-occurrence order.

    Args:
        references: References in document order (duplicates allowed)
        published: Published URL for every referenced URL

    Returns:
        List of ReplacementMapping objects
    """
    first_seen: dict[str, Reference] = {}
    for reference in references:
        first_seen.setdefault(reference.url, reference)
    return [
        ReplacementMapping(
            original_text=first_seen[url].original_text,
            original_url=url,
            published_url=published[url],
        )
        for url in unique_urls(references)
    ]


def render_body(mappings: list[ReplacementMapping]) -> str:
    """Render the replacement body for a list of mappings.

    Args:
        mappings: Mappings in the order they should appear

    Returns:
        Markdown text, empty when there are no mappings
    """
    template = _ENV.get_template("body.md.j2")
    return template.render(mappings=mappings).strip()


def rewrite_text(text: str, references: list[Reference], published: dict[str, str]) -> str:
    """Replace the URL inside every reference span with its published URL.

    Text outside the reference spans is left untouched.

    Args:
        text: The source text the references were extracted from
        references: References with their offsets in text
        published: Published URL for every referenced URL

    Returns:
        The rewritten text
    """
    parts: list[str] = []
    cursor = 0
    for reference in sorted(references, key=lambda ref: ref.start):
        parts.append(text[cursor:reference.start])
        parts.append(_swap_url(reference, published.get(reference.url, reference.url)))
        cursor = reference.end
    parts.append(text[cursor:])
    return "".join(parts)


def _swap_url(reference: Reference, new_url: str) -> str:
    original = reference.original_text
    offset = reference.url_offset
    if original.startswith(reference.url, offset):
        return original[:offset] + new_url + original[offset + len(reference.url):]
    return original.replace(reference.url, new_url, 1)
