"""
Main CLI entry point for ziprelay
"""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install

from .. import __version__
from .utils.async_runner import EXIT_ERROR, EXIT_INTERRUPTED

# Install rich traceback handler for better error display
install(show_locals=False)

# Initialize console
console = Console()

# Configure logging (stderr keeps --json output clean)
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
)


@click.group()
@click.version_option(version=__version__, prog_name="ziprelay")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, no_color: bool) -> None:
    """
    ziprelay - Zip archive relay

    Picks up zip archives dropped into a watched directory, extracts their
    XML documents and delivers them in batches to an S3-compatible bucket.

    Examples:
      ziprelay config init                  # Write ./ziprelay.yaml
      ziprelay config validate              # Check configuration
      ziprelay run --time-budget 300        # Process ready archives
    """
    ctx.ensure_object(dict)

    # Configure console
    if no_color:
        ctx.obj["console"] = Console(force_terminal=False, no_color=True)
    else:
        ctx.obj["console"] = console

    # Configure logging level
    if verbose:
        logging.getLogger("ziprelay").setLevel(logging.DEBUG)
        ctx.obj["verbose"] = True
    else:
        ctx.obj["verbose"] = False

    ctx.obj["no_color"] = no_color


# Import and register commands at module level to support testing
from .commands import config, run  # noqa: E402

cli.add_command(run.run)
cli.add_command(config.config)


def main() -> None:
    """Main entry point for the CLI application"""
    try:
        cli()

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation interrupted by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            console.print_exception()
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
