"""
Configuration management commands
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from ...core.config_manager import ConfigurationError, ConfigurationManager
from ..ui.display import create_config_table, create_error_display, flatten_config
from ..utils.async_runner import EXIT_ERROR, async_command

PATH_ARGUMENT = click.Path(dir_okay=False, path_type=Path)


@click.group()
def config() -> None:
    """
    Configuration management commands.

    Create and check the YAML file holding source directories, destination
    bucket, batching and extraction limits.
    """
    pass


@config.command()
@click.argument("path", required=False, type=PATH_ARGUMENT)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
@async_command
async def init(ctx: click.Context, path: Optional[Path], force: bool) -> None:
    """
    Write a commented default configuration file.

    PATH defaults to $ZIPRELAY_CONFIG_PATH or ./ziprelay.yaml.
    """
    console: Console = ctx.obj["console"]

    try:
        written = await ConfigurationManager().generate_default_config(path, overwrite=force)
    except ConfigurationError as e:
        console.print(create_error_display(e, "Configuration Error"))
        ctx.exit(EXIT_ERROR)

    console.print(
        Panel(
            f"Configuration written to [cyan]{written}[/cyan]\n\n"
            "Next steps:\n"
            "  1. Set source, archive and failed directories\n"
            "  2. Set the destination bucket (or ZIPRELAY_DESTINATION_BUCKET)\n"
            "  3. Check it with: ziprelay config validate",
            title="[green]Configuration created[/green]",
            border_style="green",
        )
    )


@config.command()
@click.argument("path", required=False, type=PATH_ARGUMENT)
@click.pass_context
@async_command
async def validate(ctx: click.Context, path: Optional[Path]) -> None:
    """
    Load and validate a configuration file.

    Environment overrides are applied exactly as for 'ziprelay run'.
    """
    console: Console = ctx.obj["console"]
    config_manager = ConfigurationManager()

    try:
        relay_config = await config_manager.load_config(path)
    except ConfigurationError as e:
        console.print(create_error_display(e, "Configuration Error"))
        ctx.exit(EXIT_ERROR)

    table = create_config_table(
        flatten_config(relay_config.model_dump(mode="json")), "ziprelay Configuration"
    )
    console.print(table)
    console.print(f"\n[green]✓ Configuration is valid[/green] [dim]({config_manager.config_path})[/dim]")
