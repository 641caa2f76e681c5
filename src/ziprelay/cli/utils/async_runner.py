"""
Async execution utilities for CLI commands
"""

import asyncio
import logging
import sys
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import click
from rich.console import Console

from ...models.errors import RelayError

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

EXIT_ERROR = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

logger = logging.getLogger(__name__)


def describe_failure(error: BaseException) -> str:
    """Describe a command failure, including the wrapped cause for relay errors."""
    if isinstance(error, RelayError):
        return error.full_message
    return str(error) or type(error).__name__


def async_command(f: F) -> Callable[..., Any]:
    """
    Run an async click command with ``asyncio.run``.

    ``ctx.exit()`` and click usage errors keep their own exit codes. An
    interrupt exits 130 and any other error is printed to stderr and exits 1.
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return asyncio.run(f(*args, **kwargs))
        except (click.exceptions.Exit, click.ClickException):
            raise
        except KeyboardInterrupt:
            Console(stderr=True).print("\n[yellow]Relay interrupted by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            Console(stderr=True).print(f"[red]Relay failed: {describe_failure(e)}[/red]")
            sys.exit(EXIT_ERROR)

    return wrapper
