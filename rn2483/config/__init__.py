"""Configuration management package.

Provides layered configuration with defaults, YAML file loading and
environment variable overrides.
"""

from rn2483.config.config_manager import ConfigManager
from rn2483.config.config_schema import ConfigSchema
from rn2483.config.defaults import get_default_config
from rn2483.config.config_models import (
    Config,
    SerialConfig,
    CommandConfig,
    ListenerConfig,
    RoutingConfig,
    LoggingConfig,
    RoutingMode,
    LogLevel
)

__all__ = [
    'ConfigManager',
    'ConfigSchema',
    'get_default_config',
    'Config',
    'SerialConfig',
    'CommandConfig',
    'ListenerConfig',
    'RoutingConfig',
    'LoggingConfig',
    'RoutingMode',
    'LogLevel',
]
