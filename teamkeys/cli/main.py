"""Main CLI entry point for teamkeys."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from teamkeys.cli.config import config
from teamkeys.cli.init import init
from teamkeys.cli.team import team
from teamkeys.exceptions import TeamKeysError

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.option("--home", type=click.Path(path_type=Path), help="Path to the teamkeys home directory")
@click.option("--debug/--no-debug", default=False, help="Show debug information")
@click.pass_context
def cli(ctx: click.Context, home: Path | None, debug: bool) -> None:
    """teamkeys - signed rosters of who holds which key in your team.

    Every member keeps a copy of the roster and its signature, so anyone can
    check that an admin vouched for the key they're about to use.
    """
    ctx.ensure_object(dict)
    ctx.obj["home_path"] = home
    ctx.obj["debug"] = debug
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.pass_context
def help(ctx: click.Context) -> None:
    """Show this help message."""
    click.echo(ctx.parent.get_help())


# Register commands
cli.add_command(init)
cli.add_command(config)
cli.add_command(team)


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli()
    except TeamKeysError as e:
        # Only shown when --debug has configured logging
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
