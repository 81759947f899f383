"""Helpers shared by the search and info commands."""

from __future__ import annotations

import sys

import click

from ..console import console
from ..module_resolution import ModuleResolver
from ..paths import create_module_resolver
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message


def resolver_from_context(ctx: click.Context) -> ModuleResolver:
    """Build a resolver from the global CLI options stored on the context."""
    opts = ctx.obj or {}
    return create_module_resolver(
        root=opts.get("root"),
        modules_path=opts.get("modules_path"),
        sources=opts.get("sources") or None,
    )


def fail(action: str, e: Exception) -> None:
    """Print a formatted error and exit with status 1."""
    console.print(f"[red]Error:[/red] Failed to {action}: {escape_markup(format_error_message(e))}", soft_wrap=True)
    sys.exit(1)


def capability_line(flags: dict[str, bool]) -> str:
    enabled = [name for name, on in flags.items() if on]
    return ", ".join(enabled) if enabled else "none"
