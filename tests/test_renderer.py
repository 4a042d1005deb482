from attachment_migrator.core.extractor import extract_references
from attachment_migrator.core.types import ReplacementMapping
from attachment_migrator.output.renderer import build_mappings, render_body, rewrite_text


def _mapping(n: int) -> ReplacementMapping:
    return ReplacementMapping(
        original_text=f"![f{n}](https://example.com/{n}.png)",
        original_url=f"https://example.com/{n}.png",
        published_url=f"https://owner.github.io/assets/dir/{n}.png",
    )


def test_render_body_outputs_one_block_per_mapping() -> None:
    body = render_body([_mapping(1), _mapping(2)])
    lines = body.splitlines()

    assert lines[:5] == [
        "| 🏷️ | 🔗 File 1 |",
        "| :---: | :---: |",
        "| 📷 | ![](https://owner.github.io/assets/dir/1.png) |",
        "| 🕸️ | `https://example.com/1.png` |",
        "| ✨ | `https://owner.github.io/assets/dir/1.png` |",
    ]
    assert lines[5] == ""
    assert lines[6:9] == ["```", "![](https://owner.github.io/assets/dir/1.png)", "```"]
    assert "| 🏷️ | 🔗 File 2 |" in lines
    assert body.endswith("```")
    assert body.count("```") == 4


def test_render_body_is_empty_without_mappings() -> None:
    assert render_body([]) == ""


def test_render_body_does_not_escape_markup() -> None:
    mapping = ReplacementMapping(
        original_text='<img src="https://example.com/a.png?x=1&y=2">',
        original_url="https://example.com/a.png?x=1&y=2",
        published_url="https://owner.github.io/assets/dir/a.png",
    )

    assert "`https://example.com/a.png?x=1&y=2`" in render_body([mapping])


def test_build_mappings_dedupes_in_first_occurrence_order() -> None:
    text = (
        "![b](https://example.com/b.png)\n"
        "![a](https://example.com/a.png)\n"
        "![b again](https://example.com/b.png)\n"
    )
    references = extract_references(text)
    published = {
        "https://example.com/a.png": "https://cdn/a.png",
        "https://example.com/b.png": "https://cdn/b.png",
    }

    mappings = build_mappings(references, published)

    assert [m.original_url for m in mappings] == ["https://example.com/b.png", "https://example.com/a.png"]
    assert mappings[0].original_text == "![b](https://example.com/b.png)"
    assert mappings[1].published_url == "https://cdn/a.png"


def test_rewrite_text_replaces_only_reference_urls() -> None:
    text = (
        "Intro https://example.com/a.png stays.\n"
        "![https://example.com/a.png](https://example.com/a.png)\n"
        '<img width="10" src="https://example.com/b.png">\n'
        "![again](https://example.com/a.png)\n"
    )
    references = extract_references(text)
    published = {
        "https://example.com/a.png": "https://cdn/a.png",
        "https://example.com/b.png": "https://cdn/b.png",
    }

    rewritten = rewrite_text(text, references, published)

    assert rewritten == (
        "Intro https://example.com/a.png stays.\n"
        "![https://example.com/a.png](https://cdn/a.png)\n"
        '<img width="10" src="https://cdn/b.png">\n'
        "![again](https://cdn/a.png)\n"
    )


def test_rewrite_text_without_references_is_identity() -> None:
    text = "nothing to see `![x](https://example.com/x.png)`"

    assert rewrite_text(text, extract_references(text), {}) == text
