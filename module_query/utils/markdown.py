"""Readme rendering."""

from markdown_it import MarkdownIt

_renderer = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])


def render_markdown(text: str) -> str:
    """Render markdown to HTML. Pure, performs no I/O."""
    return _renderer.render(text)
