"""
Configuration loading, validation and default generation.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.config_models import DestinationConfig, RelayConfig, SourceConfig
from .environment_manager import EnvironmentManager
from .yaml_parser import YAMLConfigParser

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "ziprelay.yaml"


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""

    pass


class ConfigurationManager:
    """Loads ``RelayConfig`` from YAML, applying environment overrides."""

    def __init__(self, env_manager: Optional[EnvironmentManager] = None) -> None:
        self.yaml_parser = YAMLConfigParser()
        self.env_manager = env_manager or EnvironmentManager()
        self.current_config: Optional[RelayConfig] = None
        self.config_path: Optional[Path] = None

    async def load_config(self, config_path: Optional[Path] = None) -> RelayConfig:
        """
        Load and validate configuration.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_path = Path(config_path) if config_path else self.get_default_config_path()
        self.config_path = config_path

        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found at {config_path}. "
                f"Run 'ziprelay config init' to create one."
            )

        try:
            config_data = await self.yaml_parser.load_yaml_config(config_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}") from e

        config = await self.validate_config(config_data)
        self.current_config = config

        logger.info(f"Configuration loaded from {config_path}")
        return config

    async def validate_config(self, config_data: Dict[str, Any]) -> RelayConfig:
        """
        Apply environment overrides to raw data and validate it.

        Raises:
            ConfigurationError: If an override or the resulting data is invalid
        """
        try:
            self.env_manager.apply_overrides(config_data)
            config = RelayConfig(**config_data)
        except (ValidationError, ValueError, TypeError) as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        self._warn_on_suspicious_settings(config)
        return config

    async def generate_default_config(
        self, config_path: Optional[Path] = None, overwrite: bool = False
    ) -> Path:
        """
        Write a commented default configuration file.

        Returns:
            Path of the written file
        """
        config_path = Path(config_path) if config_path else self.get_default_config_path()

        if config_path.exists() and not overwrite:
            raise ConfigurationError(f"Configuration file already exists at {config_path}")

        default_config = RelayConfig(
            source=SourceConfig(
                source_dir=Path("./incoming"),
                archive_dir=Path("./archive"),
                failed_dir=Path("./failed"),
            ),
            destination=DestinationConfig(bucket="ziprelay-bucket"),
        )
        config_dict = default_config.model_dump(mode="json")
        config_dict["destination"]["bucket"] = "${ZIPRELAY_DESTINATION_BUCKET:ziprelay-bucket}"

        try:
            await self.yaml_parser.save_yaml_config(config_dict, config_path)
        except OSError as e:
            raise ConfigurationError(f"Configuration saving failed: {e}") from e

        logger.info(f"Default configuration generated at {config_path}")
        return config_path

    def get_default_config_path(self) -> Path:
        """``$ZIPRELAY_CONFIG_PATH`` if set, otherwise ./ziprelay.yaml."""
        env_path = self.env_manager.get_config_path()
        if env_path:
            return Path(env_path).expanduser()
        return Path.cwd() / DEFAULT_CONFIG_FILENAME

    def _warn_on_suspicious_settings(self, config: RelayConfig) -> None:
        source = config.source
        if source.source_dir.resolve() in (
            source.archive_dir.resolve(),
            source.failed_dir.resolve(),
        ):
            logger.warning(
                f"Routing directories overlap with source_dir {source.source_dir}; "
                f"processed archives would be picked up again"
            )

        if config.processing.upload_concurrency > config.processing.batch_size:
            logger.warning(
                f"upload_concurrency ({config.processing.upload_concurrency}) exceeds "
                f"batch_size ({config.processing.batch_size}); waves never fill"
            )
