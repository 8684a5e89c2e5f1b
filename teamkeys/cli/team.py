"""Team commands for teamkeys CLI."""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from teamkeys.exceptions import (
    AmbiguousMatchError,
    InvalidFingerprintError,
    KeyLoadError,
    SignatureError,
    TeamKeysError,
    TeamNotFoundError,
)
from teamkeys.models.person import Person
from teamkeys.models.team import Team
from teamkeys.services.home import HomeService
from teamkeys.services.keys import Ed25519Key
from teamkeys.services.team import TeamService
from teamkeys.utils.fingerprint import Fingerprint

console = Console()


def _team_service(ctx: click.Context) -> TeamService:
    return TeamService(HomeService(ctx.obj.get("home_path")))


def _find_team(service: TeamService, query: str) -> Team:
    """Find a team, printing a friendly message and aborting if there's no single match."""
    try:
        return service.find(query)
    except TeamNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise click.Abort() from None
    except AmbiguousMatchError as e:
        console.print(f"[red]Multiple teams match '{query}':[/red]")
        for match in e.matches:
            console.print(f"  - {match}")
        console.print("\nUse the team UUID to be more specific.")
        raise click.Abort() from None
    except TeamKeysError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from None


def _load_key(path: Path) -> Ed25519Key:
    try:
        return Ed25519Key.load(path)
    except KeyLoadError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from None


def _load_signing_key(ctx: click.Context, key_path: Path | None) -> Ed25519Key:
    """Load the signing key from --key or the signing.key setting."""
    if key_path is None:
        key_path = HomeService(ctx.obj.get("home_path")).signing_key_path()
    if key_path is None:
        console.print("[red]No signing key.[/red] Pass --key or run:")
        console.print("  teamkeys config set signing.key /path/to/private-key.pem")
        raise click.Abort()

    key = _load_key(key_path)
    if not key.has_private_key:
        console.print(f"[red]Not a private key:[/red] {key_path}")
        raise click.Abort()
    return key


@click.group()
def team() -> None:
    """View, verify and update team rosters."""
    pass


@team.command(name="list")
@click.pass_context
def team_list(ctx: click.Context) -> None:
    """List all teams."""
    try:
        teams = _team_service(ctx).list_all()
    except TeamKeysError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from None

    if not teams:
        console.print("[dim]No teams found[/dim]")
        return

    table = Table(title="Teams")
    table.add_column("Name", style="bold")
    table.add_column("UUID", style="cyan", no_wrap=True)
    table.add_column("Version", justify="right")
    table.add_column("Members", justify="right")
    table.add_column("Admins", justify="right")
    for t in teams:
        table.add_row(
            escape(t.name),
            str(t.uuid),
            str(t.version),
            str(len(t.people)),
            str(len(t.admins())),
        )
    console.print(table)


@team.command(name="show")
@click.argument("query")
@click.pass_context
def team_show(ctx: click.Context, query: str) -> None:
    """Show the members of a team.

    QUERY is a team UUID or part of a team name.
    """
    service = _team_service(ctx)
    found = _find_team(service, query)
    last_verified = service.last_verified(found)

    console.print(f"[bold]{escape(found.name)}[/bold]")
    console.print(f"  UUID: [cyan]{found.uuid}[/cyan]")
    console.print(f"  Version: {found.version}")
    if last_verified is None:
        console.print("  Last verified: [dim]never[/dim]")
    else:
        console.print(f"  Last verified: {last_verified:%Y-%m-%d %H:%M} UTC")

    table = Table()
    table.add_column("Email")
    table.add_column("Fingerprint", no_wrap=True)
    table.add_column("Admin")
    for person in found.people:
        admin = "yes" if person.is_admin else ""
        table.add_row(escape(person.email), str(person.fingerprint), admin)
    console.print(table)


@team.command(name="verify")
@click.argument("query")
@click.option(
    "-k",
    "--key",
    "key_paths",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Public key of an admin to verify against (repeatable)",
)
@click.pass_context
def team_verify(ctx: click.Context, query: str, key_paths: tuple[Path, ...]) -> None:
    """Check that a team's roster was signed by one of its admins.

    Only the given keys that belong to admins of the team are trusted.

    Examples:
        teamkeys team verify Kiffix --key alice.pub.pem --key bob.pub.pem
    """
    service = _team_service(ctx)
    found = _find_team(service, query)
    keys = [_load_key(path) for path in key_paths]

    try:
        service.verify(found, keys)
    except SignatureError as e:
        console.print(
            f"[red]Roster for {escape(found.name)} is not verified:[/red] {escape(str(e))}"
        )
        raise click.Abort() from None

    console.print(f"[green]Roster for {escape(found.name)} is signed by an admin[/green]")


@team.command(name="create")
@click.argument("name")
@click.option("-e", "--email", required=True, help="Your email address")
@click.option(
    "-k",
    "--key",
    "key_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Your private key (defaults to the signing.key setting)",
)
@click.pass_context
def team_create(ctx: click.Context, name: str, email: str, key_path: Path | None) -> None:
    """Create a new team with yourself as its admin.

    Examples:
        teamkeys team create "Kiffix" --email me@example.com
    """
    signing_key = _load_signing_key(ctx, key_path)
    try:
        created, directory = _team_service(ctx).create(name, email, signing_key)
    except TeamKeysError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from None

    console.print(f"[green]Created team:[/green] {escape(created.name)}")
    console.print(f"  UUID: [cyan]{created.uuid}[/cyan]")
    console.print(f"  Saved to: {directory}")


@team.command(name="add")
@click.argument("query")
@click.option("-e", "--email", required=True, help="Email address of the person")
@click.option("-f", "--fingerprint", required=True, help="Fingerprint of the person's key")
@click.option("--admin", is_flag=True, help="Make the person an admin")
@click.option(
    "-k",
    "--key",
    "key_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Your private key (defaults to the signing.key setting)",
)
@click.option("-y", "--yes", is_flag=True, help="Don't ask before changing an existing person")
@click.pass_context
def team_add(
    ctx: click.Context,
    query: str,
    email: str,
    fingerprint: str,
    admin: bool,
    key_path: Path | None,
    yes: bool,
) -> None:
    """Add a person to a team, or update them, and re-sign the roster.

    QUERY is a team UUID or part of a team name.

    Examples:
        teamkeys team add Kiffix -e jane@example.com -f "AAAA BBBB ..."
    """
    try:
        parsed = Fingerprint.parse(fingerprint)
    except InvalidFingerprintError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise click.Abort() from None

    service = _team_service(ctx)
    found = _find_team(service, query)
    person = Person(email=email, fingerprint=parsed, is_admin=admin)

    warning = found.get_upsert_person_warnings(person)
    if warning is not None:
        console.print(f"[yellow]Warning:[/yellow] {escape(person.email)}: {warning.message}")
        if not yes and not click.confirm("Continue?", default=False):
            raise click.Abort()

    signing_key = _load_signing_key(ctx, key_path)
    try:
        _, directory = service.upsert_person(found, person, signing_key)
    except TeamKeysError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from None

    console.print(f"[green]Updated team:[/green] {escape(found.name)} (version {found.version})")
    console.print(f"  {escape(str(person))}")
    console.print(f"  Saved to: {directory}")
