"""Init command for teamkeys CLI."""

from pathlib import Path

import click
from rich.console import Console

from teamkeys.services.home import HomeService

console = Console()


@click.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the teamkeys home directory.

    The home directory is taken from --home, then TEAMKEYS_HOME, then
    defaults to ~/.teamkeys.
    """
    home_path: Path | None = ctx.obj.get("home_path")
    home_service = HomeService(home_path)

    try:
        home = home_service.initialize()
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort() from None

    console.print(f"[green]Initialized teamkeys home in:[/green] {home}")
    console.print("\nCreated:")
    console.print("  teams/")
    console.print("  config.yaml")
    console.print("\nSet your signing key with:")
    console.print("  teamkeys config set signing.key /path/to/private-key.pem")
