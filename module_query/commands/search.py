"""Search command - find modules in the local tree and the registry."""

from __future__ import annotations

import asyncio
import json

import click
from rich.panel import Panel

from ..console import console
from ..errors import ModuleQueryError
from ..models import ModuleDescriptor
from ..models import SearchOptions
from ..utils.error_format import escape_markup
from ._common import capability_line
from ._common import fail
from ._common import resolver_from_context


def _render_module(module: ModuleDescriptor) -> Panel:
    origin = "[green]local[/green]" if module.is_local else "[cyan]registry[/cyan]"
    header = f"{escape_markup(module.name)} ({escape_markup(module.version or 'unknown')}) {origin}"

    content_parts = [escape_markup(module.description or "No description")]
    if module.author:
        content_parts.append(f"\n[dim]Author: {escape_markup(module.author)}[/dim]")
    content_parts.append(f"\n[dim]Entry points: {capability_line(module.capability_flags)}[/dim]")
    if module.is_deprecated:
        content_parts.append("\n[yellow]Deprecated[/yellow]")

    border = "yellow" if module.is_deprecated else "cyan"
    return Panel("".join(content_parts), title=header, border_style=border, padding=(0, 1))


@click.command("search")
@click.argument("term", default="")
@click.option("--keyword", "-k", "keywords", multiple=True, help="Keyword the registry results must carry (repeatable)")
@click.option("--include-scoped", is_flag=True, help="Include @scope/name registry packages")
@click.option("--include-deprecated", is_flag=True, help="Include deprecated registry packages")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search_command(
    ctx: click.Context,
    term: str,
    keywords: tuple[str, ...],
    include_scoped: bool,
    include_deprecated: bool,
    output_json: bool,
):
    """Search for modules whose name matches TERM.

    Local modules are listed first; registry modules with the same name as
    a local one are hidden.

    Example:

        modquery --root . --modules-path plugins search foo
    """
    options = SearchOptions(
        keywords=keywords,
        include_scoped=include_scoped,
        include_deprecated=include_deprecated,
    )

    async def _run() -> list[ModuleDescriptor]:
        async with resolver_from_context(ctx) as resolver:
            return await resolver.search(term, options)

    try:
        results = asyncio.run(_run())
    except (ModuleQueryError, ValueError) as e:
        fail("search modules", e)
        return

    if output_json:
        output = {"query": term, "total": len(results), "results": [m.to_dict() for m in results]}
        click.echo(json.dumps(output, indent=2))
        return

    if not results:
        console.print(f'[yellow]No modules found matching "{escape_markup(term)}"[/yellow]')
        console.print("\n[dim]Try:[/dim]")
        console.print("  - Using a shorter term")
        console.print("  - Removing keyword filters (--keyword)")
        console.print("  - Including scoped or deprecated packages")
        return

    console.print(f'\n[bold]Found {len(results)} modules matching "{escape_markup(term)}":[/bold]\n')
    for module in results:
        console.print(_render_module(module))

    console.print("\n[dim]To view details:[/dim]")
    console.print("  [cyan]modquery info <name-or-path>[/cyan]")
