"""Info command - show the full descriptor of one module."""

from __future__ import annotations

import asyncio
import json

import click
from rich.panel import Panel

from ..console import Markdown
from ..console import console
from ..errors import ModuleQueryError
from ..models import ModuleDescriptor
from ..utils.error_format import escape_markup
from ._common import capability_line
from ._common import fail
from ._common import resolver_from_context

# Number of versions listed before eliding the rest
MAX_VERSIONS_SHOWN = 10


def _render_descriptor(module: ModuleDescriptor) -> Panel:
    title = f"{escape_markup(module.name)} ({escape_markup(module.version or 'unknown')})"
    if module.is_deprecated:
        title = f"{title} [yellow]\\[Deprecated][/yellow]"

    content_parts = []
    if module.description:
        content_parts.append(f"[bold]Description:[/bold] {escape_markup(module.description)}")
    content_parts.append(f"[bold]Author:[/bold] {escape_markup(module.author or 'Unknown')}")
    content_parts.append(f"[bold]Source:[/bold] {'local' if module.is_local else 'registry'}")
    content_parts.append(f"[bold]Entry points:[/bold] {capability_line(module.capability_flags)}")

    versions = list(module.versions)
    shown = ", ".join(escape_markup(v) for v in versions[:MAX_VERSIONS_SHOWN])
    if len(versions) > MAX_VERSIONS_SHOWN:
        shown += f" [dim](+{len(versions) - MAX_VERSIONS_SHOWN} more)[/dim]"
    content_parts.append(f"[bold]Versions:[/bold] {shown}")

    for label, value in (("Serves", module.serves), ("Builds", module.builds), ("Metadata", module.metadata)):
        if value:
            content_parts.append(f"[bold]{label}:[/bold] {escape_markup(json.dumps(value))}")

    content_parts.append(f"[bold]Readme:[/bold] {'yes' if module.readme_html else 'none'}")
    return Panel("\n".join(content_parts), title=title, border_style="cyan", padding=(1, 2))


@click.command("info")
@click.argument("identifier")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--readme", "show_readme", is_flag=True, help="Print the module readme below the summary")
@click.pass_context
def info_command(ctx: click.Context, identifier: str, output_json: bool, show_readme: bool):
    """Show detailed information about a module.

    IDENTIFIER is a registry name (e.g. lodash, @scope/name) or an absolute
    local path under the root (e.g. /plugins/foo-bar).

    Example:

        modquery info lodash

        modquery info /plugins/foo-bar --readme
    """

    async def _run() -> ModuleDescriptor:
        async with resolver_from_context(ctx) as resolver:
            return await resolver.describe(identifier)

    try:
        module = asyncio.run(_run())
    except (ModuleQueryError, ValueError) as e:
        fail("fetch module info", e)
        return

    if output_json:
        click.echo(json.dumps(module.to_dict(), indent=2))
        return

    console.print()
    console.print(_render_descriptor(module))
    console.print()

    if show_readme:
        if module.readme_text:
            console.print(Markdown(module.readme_text))
        else:
            console.print("[dim]No readme published for this module.[/dim]")
        console.print()
