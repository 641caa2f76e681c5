"""
Configuration and logging infrastructure.
"""

from .config_manager import ConfigurationError, ConfigurationManager
from .environment_manager import EnvironmentManager
from .logging_setup import setup_logging
from .yaml_parser import YAMLConfigParser

__all__ = [
    "ConfigurationError",
    "ConfigurationManager",
    "EnvironmentManager",
    "YAMLConfigParser",
    "setup_logging",
]
