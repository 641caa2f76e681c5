"""
Logging configuration for the relay.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ..models.config_models import LoggingConfig

PACKAGE_LOGGER = "ziprelay"

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def setup_logging(
    config: LoggingConfig,
    console: Optional[Console] = None,
    verbose: bool = False,
) -> None:
    """
    Configure the package logger from ``config``.

    Console output goes through a RichHandler on the root logger when one
    is not already installed; ``config.file_path`` adds a plain-text file
    handler using ``config.format``.
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    root_logger = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root_logger.handlers):
        root_logger.addHandler(
            RichHandler(console=console or Console(stderr=True), rich_tracebacks=True)
        )

    if config.file_path:
        log_path = Path(config.file_path).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.format))
        package_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.debug(
        f"Logging configured at {logging.getLevelName(level)}"
        + (f", writing to {config.file_path}" if config.file_path else "")
    )
