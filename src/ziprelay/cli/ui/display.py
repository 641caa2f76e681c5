"""
Rich display components for invocation results and configuration
"""

from typing import Any, Dict, Optional

from rich.panel import Panel
from rich.table import Table

from ...models.errors import RelayError, root_cause
from ...models.processing_models import InvocationResult


def create_config_table(config_data: Dict[str, Any], title: str = "Configuration") -> Table:
    """
    Create a Rich table for configuration display
    """
    table = Table(title=title, show_header=True, header_style="bold blue")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in config_data.items():
        table.add_row(key, "not set" if value is None else str(value))

    return table


def flatten_config(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested configuration into dotted keys"""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_config(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def create_summary_table(result: InvocationResult) -> Table:
    """
    Create the per-invocation summary table
    """
    table = Table(title="Invocation Summary", show_header=True, header_style="bold blue")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    failed_style = "red" if result.zips_failed else "green"
    table.add_row("Archives processed", f"[green]{result.zips_processed}[/green]")
    table.add_row("Archives failed", f"[{failed_style}]{result.zips_failed}[/{failed_style}]")
    table.add_row("Files uploaded", str(result.total_files_uploaded))
    table.add_row("Files failed", str(result.total_files_failed))
    table.add_row("Files filtered", str(result.total_files_filtered))
    table.add_row("Archives deferred", str(result.archives_skipped))
    table.add_row("Oldest archive age", format_duration(result.oldest_age_ms / 1000))
    table.add_row("Stopped early", "[yellow]yes[/yellow]" if result.stopped_early else "no")

    return table


def create_failures_table(result: InvocationResult) -> Table:
    """
    Create a table listing every failed archive and its cause
    """
    table = Table(title="Failed Archives", show_header=True, header_style="bold red")
    table.add_column("Archive", style="cyan")
    table.add_column("Uploaded", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Error", style="red")

    for failure in result.failures:
        table.add_row(
            failure.archive_path.name or str(failure.archive_path),
            str(failure.files_uploaded),
            str(failure.files_failed),
            _describe_error(failure.error),
        )

    return table


def _describe_error(error: Optional[RelayError]) -> str:
    if error is None:
        return "unknown"
    cause = root_cause(error)
    if cause is error:
        return error.message
    return f"{error.message} ({cause})"


def create_error_display(error: Exception, context: Optional[str] = None) -> Panel:
    """
    Create formatted error display with suggestions
    """
    error_lines = []

    if context:
        error_lines.append(f"Context: {context}")
        error_lines.append("")

    error_lines.append(f"Error: {error}")
    error_lines.append("")

    message = str(error).lower()
    if "not found" in message:
        suggestions = [
            "Create a configuration file: ziprelay config init",
            "Point at an existing file: --config PATH or ZIPRELAY_CONFIG_PATH",
        ]
    elif "environment variable" in message:
        suggestions = [
            "Export the missing variable or give it a default: ${VAR:default}",
        ]
    else:
        suggestions = [
            "Check the configuration file: ziprelay config validate",
            "Run with --verbose for detailed error information",
        ]

    error_lines.append("Suggestions:")
    for suggestion in suggestions:
        error_lines.append(f"  • {suggestion}")

    return Panel(
        "\n".join(error_lines),
        title="[red]Error[/red]",
        border_style="red",
        padding=(1, 2),
    )


def format_duration(seconds: float) -> str:
    """Format duration in a human-readable way"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
