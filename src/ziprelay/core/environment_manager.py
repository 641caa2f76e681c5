"""
Environment variable overrides for the relay configuration.
"""

import logging
import os
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

ENV_PREFIX = "ZIPRELAY_"
CONFIG_PATH_VAR = f"{ENV_PREFIX}CONFIG_PATH"

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


def parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _optional_str(value: str) -> Optional[str]:
    return value or None


# Variable suffix -> (section, key, converter)
OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "SOURCE_DIR": ("source", "source_dir", str),
    "ARCHIVE_DIR": ("source", "archive_dir", str),
    "FAILED_DIR": ("source", "failed_dir", str),
    "MIN_FILE_AGE_MS": ("source", "min_file_age_ms", int),
    "DELETE_ON_SUCCESS": ("source", "delete_on_success", parse_bool),
    "MAX_FILES_PER_INVOCATION": ("source", "max_files_per_invocation", int),
    "DESTINATION_BUCKET": ("destination", "bucket", str),
    "PREFIX_BASE": ("destination", "prefix_base", str),
    "ENDPOINT_URL": ("destination", "endpoint_url", _optional_str),
    "REGION": ("destination", "region", _optional_str),
    "BATCH_SIZE": ("processing", "batch_size", int),
    "UPLOAD_CONCURRENCY": ("processing", "upload_concurrency", int),
    "TIMEOUT_BUFFER_MS": ("processing", "timeout_buffer_ms", int),
    "FILENAME_PATTERN": ("processing", "filename_pattern", _optional_str),
    "FILTER_PATTERN": ("processing", "filter_pattern", _optional_str),
    "LOG_LEVEL": ("logging", "level", str.upper),
    "LOG_FILE": ("logging", "file_path", _optional_str),
}


class EnvironmentManager:
    """Reads ``ZIPRELAY_*`` overrides from the process environment."""

    def __init__(self, environ: Optional[Dict[str, str]] = None) -> None:
        self.environ = os.environ if environ is None else environ

    def get_config_path(self) -> Optional[str]:
        return self.environ.get(CONFIG_PATH_VAR) or None

    def get_config_overrides(self) -> Dict[str, str]:
        """Raw values of every recognised override that is set."""
        return {
            f"{ENV_PREFIX}{suffix}": self.environ[f"{ENV_PREFIX}{suffix}"]
            for suffix in OVERRIDES
            if f"{ENV_PREFIX}{suffix}" in self.environ
        }

    def apply_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment overrides to raw configuration data in place.

        Raises:
            ValueError: If an override cannot be converted to its field type
        """
        applied = 0
        for suffix, (section, key, convert) in OVERRIDES.items():
            var_name = f"{ENV_PREFIX}{suffix}"
            raw = self.environ.get(var_name)
            if raw is None:
                continue

            try:
                value = convert(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {var_name}: {e}") from e

            section_data = config_data.setdefault(section, {})
            if section_data is None:
                section_data = config_data[section] = {}
            section_data[key] = value
            applied += 1

        if applied:
            logger.debug(f"Applied {applied} environment override(s)")
        return config_data
