"""Shared Rich console instance for CLI output."""

from rich.console import Console
from rich.console import ConsoleOptions
from rich.console import RenderResult
from rich.markdown import Heading as RichHeading
from rich.markdown import Markdown as RichMarkdown
from rich.text import Text


class ReadmeHeading(RichHeading):
    """Readme heading rendered flush left, without Rich's centering or panel."""

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        text = self.text
        text.justify = "left"
        if self.tag != "h1":
            yield Text("")
        yield text


class Markdown(RichMarkdown):
    """Markdown for module readmes in the terminal."""

    elements = {
        **RichMarkdown.elements,
        "heading_open": ReadmeHeading,
    }


console = Console()

__all__ = ["console", "Markdown"]
