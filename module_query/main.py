"""modquery - search and inspect modules from a local tree and a package registry."""

import logging

import click

from .commands import info_command
from .commands import search_command
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option("--root", type=click.Path(file_okay=False), help="Local root directory")
@click.option("--modules-path", help="Modules directory, relative to the root (e.g. plugins)")
@click.option(
    "--source",
    "sources",
    multiple=True,
    type=click.Choice(["local", "registry", "npm"], case_sensitive=False),
    help="Source to query (repeatable; default: from settings)",
)
@click.option("--log-level", default=None, help="Log level for the JSONL log (default: MODQUERY_LOG_LEVEL)")
@click.option("--log-path", default=None, help="JSONL log file (default: MODQUERY_LOG_PATH)")
@click.pass_context
def cli(ctx: click.Context, root, modules_path, sources, log_level, log_path):
    """Search and describe modules across local and registry sources."""
    init_json_logging(path=log_path, level=log_level)
    ctx.ensure_object(dict)
    ctx.obj.update(root=root, modules_path=modules_path, sources=list(sources))
    logger.debug(f"modquery invoked: root={root} modules_path={modules_path} sources={list(sources)}")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


cli.add_command(search_command)
cli.add_command(info_command)


def main():
    """Entry point for the modquery console script."""
    cli()


if __name__ == "__main__":
    main()
