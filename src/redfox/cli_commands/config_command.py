"""Configuration CLI command."""

from __future__ import annotations

import typer
import yaml

from redfox.config import config_as_dict, create_global_config, default_config_path

from .shared import app, console, fail, load_settings, state


@app.command()
def config(
    action: str = typer.Argument("show", help="Action: show, init"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file on init"),
) -> None:
    """Manage RedFox configuration."""
    if action == "init":
        path = state.config_path or default_config_path()
        existed = path.expanduser().exists()
        config_path = create_global_config(path.expanduser(), force=force)
        if existed and not force:
            console.print(f"[yellow]Config already exists:[/yellow] {config_path} (use --force to overwrite)")
            return
        console.print(f"[green]Created config:[/green] {config_path}")
        return

    if action == "show":
        settings = load_settings()
        source = settings.source or "defaults"
        console.print(f"[bold]Effective configuration ({source}):[/bold]")
        console.print(yaml.safe_dump(config_as_dict(settings), default_flow_style=False, sort_keys=False))
        return

    fail(f"Unknown action: {action}. Use 'show' or 'init'.")
