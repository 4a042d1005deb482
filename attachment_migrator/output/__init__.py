"""
Output rendering.

This package renders migration results as a replacement body or as the
rewritten source text.
"""

from .renderer import build_mappings, render_body, rewrite_text

__all__ = [
    "build_mappings",
    "render_body",
    "rewrite_text",
]
