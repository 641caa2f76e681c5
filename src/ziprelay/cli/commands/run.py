"""
Run one relay invocation
"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...core.config_manager import ConfigurationError, ConfigurationManager
from ...core.logging_setup import setup_logging
from ...processing.orchestrator import InvocationBudget, InvocationOrchestrator
from ...upload.store import S3ObjectStore
from ..ui.display import create_error_display, create_failures_table, create_summary_table
from ..utils.async_runner import EXIT_ERROR, async_command

# Exit code when the invocation finished but some archives failed
EXIT_ARCHIVES_FAILED = 2


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (defaults to $ZIPRELAY_CONFIG_PATH or ./ziprelay.yaml)",
)
@click.option(
    "--time-budget",
    type=click.FloatRange(min=0, min_open=True),
    default=900.0,
    show_default=True,
    help="Seconds available for this invocation",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option(
    "--no-fail-exit",
    is_flag=True,
    help="Exit 0 even when some archives failed",
)
@click.pass_context
@async_command
async def run(
    ctx: click.Context,
    config_path: Optional[Path],
    time_budget: float,
    as_json: bool,
    no_fail_exit: bool,
) -> None:
    """
    Process ready archives from the source directory.

    Archives are extracted, batched under fresh prefixes and uploaded to the
    destination bucket, then moved to the archive or failed directory. The
    run stops starting new archives once less than the configured timeout
    buffer remains of --time-budget.

    Examples:
      ziprelay run
      ziprelay run --config ./ziprelay.yaml --time-budget 300 --json
    """
    console: Console = ctx.obj["console"]
    budget = InvocationBudget(time_budget)

    try:
        config = await ConfigurationManager().load_config(config_path)
    except ConfigurationError as e:
        console.print(create_error_display(e, "Configuration Error"))
        ctx.exit(EXIT_ERROR)

    setup_logging(config.logging, verbose=ctx.obj.get("verbose", False))

    store = S3ObjectStore.from_config(config.destination)
    orchestrator = InvocationOrchestrator.from_config(config, store)
    result = await orchestrator.run(budget.remaining_ms)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        console.print(create_summary_table(result))
        if result.failures:
            console.print(create_failures_table(result))
        if result.stopped_early:
            console.print(
                "[yellow]Stopped early to stay within the time budget; "
                "remaining archives are left for the next run.[/yellow]"
            )

    if result.zips_failed and not no_fail_exit:
        ctx.exit(EXIT_ARCHIVES_FAILED)
