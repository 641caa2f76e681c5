"""
YAML configuration parser with environment variable substitution.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

CONFIG_COMMENTS: Dict[str, Dict[str, str]] = {
    "source": {
        "_section_comment": "Source directory and archive routing",
        "source_dir": "Directory the producer deposits .zip archives into",
        "archive_dir": "Successfully processed archives are moved here",
        "failed_dir": "Archives that failed processing are moved here",
        "min_file_age_ms": "Skip archives modified more recently than this (0 disables)",
        "delete_on_success": "Delete successful archives instead of moving them",
        "max_files_per_invocation": "Maximum archives considered per run",
    },
    "destination": {
        "_section_comment": "Destination object store",
        "bucket": "Destination bucket name",
        "prefix_base": "Key prefix shared by every batch (may be empty)",
        "endpoint_url": "Custom S3-compatible endpoint, e.g. http://localhost:9000",
        "region": "Region for the S3 client",
        "max_attempts": "Client-level retry attempts per request (1-10)",
        "content_type": "Content type of uploaded objects",
    },
    "processing": {
        "_section_comment": "Batching, classification and extraction limits",
        "batch_size": "Files per batch prefix (1-1000)",
        "upload_concurrency": "Concurrent uploads per wave (1-64)",
        "timeout_buffer_ms": "Stop starting archives when less time than this remains",
        "filename_pattern": "Regex; first capture group names the output file",
        "filter_pattern": "Regex; entries whose content matches are skipped",
        "max_entries": "Maximum entries read from one archive",
        "max_entry_size": "Maximum decompressed bytes for one entry",
        "max_total_size": "Maximum decompressed bytes for one archive",
        "upload_retry_attempts": "Attempts per object before it is recorded as failed",
        "retry_wait_seconds": "Initial backoff between upload attempts",
    },
    "logging": {
        "_section_comment": "Logging configuration",
        "level": "Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        "format": "Log record format for the log file",
        "file_path": "Log file path (leave empty for console only)",
    },
}


class YAMLConfigParser:
    """YAML configuration parser with environment variable substitution."""

    def __init__(self) -> None:
        self.env_var_pattern = re.compile(r"\$\{([^}]+)\}")

    async def load_yaml_config(self, config_path: Path) -> Dict[str, Any]:
        """Load and parse YAML configuration file with environment substitution."""

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            yaml_content = f.read()

        substituted_content = self._substitute_environment_variables(yaml_content)

        try:
            config_data = yaml.safe_load(substituted_content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a YAML dictionary")

        logger.debug(f"Loaded configuration from {config_path}")
        return config_data

    async def save_yaml_config(self, config_data: Dict[str, Any], config_path: Path) -> None:
        """Write configuration data as commented YAML, replacing the file atomically."""

        config_path.parent.mkdir(parents=True, exist_ok=True)
        yaml_content = self._generate_commented_yaml(config_data)

        temp_path = config_path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(yaml_content)
            temp_path.replace(config_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info(f"Saved configuration to {config_path}")

    def _substitute_environment_variables(self, content: str) -> str:
        """Substitute ${VAR} and ${VAR:default} outside comment lines."""

        processed_lines = []

        def replace_env_var(match: Any) -> str:
            var_name = match.group(1)

            if ":" in var_name:
                var_name, default_value = var_name.split(":", 1)
                return os.getenv(var_name, default_value)

            env_value = os.getenv(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable '{var_name}' is not set")
            return env_value

        for line in content.split("\n"):
            if line.strip().startswith("#"):
                processed_lines.append(line)
                continue
            processed_lines.append(self.env_var_pattern.sub(replace_env_var, line))

        return "\n".join(processed_lines)

    def _generate_commented_yaml(self, config_data: Dict[str, Any]) -> str:
        lines = [
            "# ziprelay configuration",
            "# Environment variables can be substituted using ${VAR_NAME} "
            "or ${VAR_NAME:default} syntax",
            "",
        ]

        for section_name, section_data in config_data.items():
            section_comments = CONFIG_COMMENTS.get(section_name, {})

            if not isinstance(section_data, dict):
                lines.append(f"{section_name}: {self._format_value(section_data)}")
                lines.append("")
                continue

            lines.append(
                f"# {section_comments.get('_section_comment', f'{section_name} configuration')}"
            )
            lines.append(f"{section_name}:")
            for key, value in section_data.items():
                comment = section_comments.get(key)
                if comment:
                    lines.append(f"  # {comment}")
                lines.append(f"  {key}: {self._format_value(value)}")
            lines.append("")

        return "\n".join(lines)

    def _format_value(self, value: Any) -> str:
        if isinstance(value, str) and value.startswith("${"):
            # Substituted textually before parsing
            return f'"{value}"'
        if isinstance(value, Path):
            value = str(value)

        yaml_value = yaml.safe_dump(value, default_flow_style=True).strip()
        # yaml.dump terminates scalars with a document end marker
        if yaml_value.endswith("..."):
            yaml_value = yaml_value[:-3].strip()
        return yaml_value
