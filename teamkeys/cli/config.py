"""Config CLI commands for teamkeys."""

from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from teamkeys.services.home import HomeService

console = Console()

# Settings holding filesystem paths, stored absolute
PATH_KEYS = {"signing.key"}


def _lookup(config: dict[str, Any], key: str) -> Any:
    """Get a value by dotted key, e.g. ``signing.key``. Returns None if unset."""
    node: Any = config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _assign(config: dict[str, Any], key: str, value: Any) -> None:
    """Set a value by dotted key, creating intermediate sections."""
    *sections, leaf = key.split(".")
    node = config
    for part in sections:
        if not isinstance(node.get(part), dict):
            node[part] = {}
        node = node[part]
    node[leaf] = value


def _coerce(key: str, raw: str) -> str:
    """Turn a command line string into a config value."""
    if key in PATH_KEYS:
        return str(Path(raw).expanduser().resolve())
    return raw


def _render(value: Any) -> str:
    if value is None:
        return "[dim]not set[/dim]"
    return escape(str(value))


def _add_branch(tree: Tree, section: dict[str, Any]) -> None:
    for key, value in section.items():
        if isinstance(value, dict):
            _add_branch(tree.add(f"[cyan]{key}[/cyan]"), value)
        else:
            tree.add(f"[cyan]{key}[/cyan]: {_render(value)}")


@click.group()
def config() -> None:
    """View and modify configuration."""
    pass


@config.command(name="show")
@click.argument("key", required=False)
@click.pass_context
def config_show(ctx: click.Context, key: str | None) -> None:
    """Show configuration values.

    Examples:
        teamkeys config show
        teamkeys config show signing.key
    """
    config_data = HomeService(ctx.obj.get("home_path")).get_config()

    if key is None:
        if not config_data:
            console.print("[dim]No configuration set[/dim]")
            return
        tree = Tree("[bold]Configuration[/bold]")
        _add_branch(tree, config_data)
        console.print(tree)
        return

    value = _lookup(config_data, key)
    if isinstance(value, dict):
        tree = Tree(f"[bold cyan]{key}[/bold cyan]")
        _add_branch(tree, value)
        console.print(tree)
    elif value is None:
        console.print(f"[yellow]Key '{key}' is not set[/yellow]")
    else:
        console.print(f"{key}: {_render(value)}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value, using dot notation for nested keys.

    Examples:
        teamkeys config set signing.key ~/keys/me.pem
    """
    home_service = HomeService(ctx.obj.get("home_path"))
    config_data = home_service.get_config()

    parsed = _coerce(key, value)
    _assign(config_data, key, parsed)
    home_service.set_config(config_data)

    console.print(f"[green]Set {key} = {_render(parsed)}[/green]")


@config.command(name="unset")
@click.argument("key")
@click.pass_context
def config_unset(ctx: click.Context, key: str) -> None:
    """Remove a configuration value."""
    home_service = HomeService(ctx.obj.get("home_path"))
    config_data = home_service.get_config()

    parent_key, _, leaf = key.rpartition(".")
    parent = _lookup(config_data, parent_key) if parent_key else config_data
    if not isinstance(parent, dict) or leaf not in parent:
        console.print(f"[yellow]Key '{key}' not found[/yellow]")
        return

    del parent[leaf]
    home_service.set_config(config_data)
    console.print(f"[green]Removed {key}[/green]")
