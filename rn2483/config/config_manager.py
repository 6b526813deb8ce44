"""Configuration manager for the RN2483 link.

Loads configuration in layers: defaults, then a YAML file, then
environment variable overrides, validated against the JSON schema.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from copy import deepcopy
import logging
import os

import yaml

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
from rn2483.config.defaults import get_default_config
from rn2483.config.config_schema import ConfigSchema

_LOGGER = logging.getLogger(__name__)


class ConfigManager:
    """Layered configuration loader.

    Each instance holds one loaded Config and remembers where each value
    came from. Create one per application and pass its Config to
    Connection.

    Layering:
        1. Defaults from defaults.py
        2. YAML file (explicit path, ./rn2483.yaml, ~/.rn2483/config.yaml)
        3. Environment overrides RN2483_<SECTION>_<KEY>
        4. JSON schema validation

    Example:
        >>> manager = ConfigManager()
        >>> config = manager.load()
        >>> config.serial.baud_rate
        9600
    """

    ENV_PREFIX = "RN2483_"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_source: Dict[str, str] = {}
        self._config_path: Optional[Path] = None

    @property
    def config_path(self) -> Optional[Path]:
        """Path of the YAML file that was loaded, if any."""
        return self._config_path

    def load(self,
             config_path: Optional[Union[str, Path]] = None,
             skip_validation: bool = False) -> Config:
        """Load configuration from defaults, file and environment.

        Args:
            config_path: Optional path to a YAML file. If None, searches default paths.
            skip_validation: Skip schema validation.

        Returns:
            The loaded Config.

        Raises:
            FileNotFoundError: If an explicit config_path does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            ValueError: If the merged configuration fails validation.
        """
        self._config_source = {}
        self._config_path = None

        config_dict = get_default_config().to_dict()
        self._mark_source(config_dict, "default")

        if config_path is not None:
            path = Path(config_path).expanduser()
            if not path.is_file():
                raise FileNotFoundError(f"Config file not found: {path}")
        else:
            path = self._search_config_paths()

        if path is not None:
            file_config = self._load_from_file(path)
            config_dict = self._merge_configs(config_dict, file_config)
            self._mark_source(file_config, "file")
            self._config_path = path
            _LOGGER.debug("Loaded configuration from %s", path)

        env_overrides = self._apply_env_overrides()
        if env_overrides:
            config_dict = self._merge_configs(config_dict, env_overrides)
            self._mark_source(env_overrides, "env")

        if not skip_validation:
            is_valid, validation_errors = ConfigSchema.validate_config(config_dict)
            if not is_valid:
                error_msg = "Configuration validation failed:\n" + "\n".join(
                    f"  - {error}" for error in validation_errors
                )
                raise ValueError(error_msg)

        self._config = self._dict_to_config(config_dict)
        return self._config

    @staticmethod
    def _search_config_paths() -> Optional[Path]:
        search_paths = [
            Path("./rn2483.yaml"),
            Path.home() / ".rn2483" / "config.yaml"
        ]

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ValueError(f"Config file {path} must contain a mapping of sections")

        return config_dict

    @classmethod
    def _apply_env_overrides(cls) -> Dict[str, Any]:
        """Collect RN2483_<SECTION>_<KEY> environment variables.

        Examples:
            RN2483_SERIAL_PORT=/dev/ttyAMA0
            RN2483_SERIAL_BAUD_RATE=57600
            RN2483_ROUTING_MODE=exclusive
            RN2483_LOGGING_ENABLED=true
        """
        overrides: Dict[str, Dict[str, Any]] = {}

        for env_name, env_value in os.environ.items():
            if not env_name.startswith(cls.ENV_PREFIX):
                continue

            # RN2483_SERIAL_BAUD_RATE -> ["serial", "baud_rate"]
            parts = env_name[len(cls.ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2 or not parts[1]:
                continue

            section, key = parts
            overrides.setdefault(section, {})[key] = cls._parse_env_value(env_value)

        return overrides

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse an environment value to bool, int, float or str.

        Only the words true/false/yes/no/on/off become booleans, so numeric
        settings such as a write timeout of 0 stay integers.
        """
        lowered = value.strip().lower()
        if lowered in ('true', 'yes', 'on'):
            return True
        if lowered in ('false', 'no', 'off'):
            return False
        if lowered in ('none', 'null'):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries; override takes precedence."""
        merged = deepcopy(base)

        for section, section_values in override.items():
            if isinstance(section_values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(section_values)
            else:
                merged[section] = deepcopy(section_values)

        return merged

    def _mark_source(self, config: Dict[str, Any], source: str) -> None:
        for section, section_values in config.items():
            if isinstance(section_values, dict):
                for key in section_values.keys():
                    self._config_source[f"{section}.{key}"] = source

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        """Convert a validated configuration dictionary to a Config object."""
        defaults = get_default_config()

        def get_enum(enum_class, value, default):
            if isinstance(value, enum_class):
                return value
            if isinstance(value, str):
                for candidate in (value, value.lower(), value.upper()):
                    try:
                        return enum_class(candidate)
                    except ValueError:
                        continue
            return default

        serial_dict = config_dict.get('serial', {})
        serial = SerialConfig(
            port=serial_dict.get('port', defaults.serial.port),
            baud_rate=serial_dict.get('baud_rate', defaults.serial.baud_rate),
            data_bits=serial_dict.get('data_bits', defaults.serial.data_bits),
            stop_bits=serial_dict.get('stop_bits', defaults.serial.stop_bits),
            parity=serial_dict.get('parity', defaults.serial.parity),
            flow_control=serial_dict.get('flow_control', defaults.serial.flow_control),
            read_timeout_ms=serial_dict.get('read_timeout_ms', defaults.serial.read_timeout_ms),
            write_timeout_ms=serial_dict.get('write_timeout_ms', defaults.serial.write_timeout_ms),
            settle_delay_ms=serial_dict.get('settle_delay_ms', defaults.serial.settle_delay_ms)
        )

        command_dict = config_dict.get('command', {})
        command = CommandConfig(
            response_timeout_ms=command_dict.get(
                'response_timeout_ms', defaults.command.response_timeout_ms),
            poll_interval_ms=command_dict.get(
                'poll_interval_ms', defaults.command.poll_interval_ms)
        )

        listener_dict = config_dict.get('listener', {})
        listener = ListenerConfig(
            idle_sleep_ms=listener_dict.get('idle_sleep_ms', defaults.listener.idle_sleep_ms),
            read_buffer_size=listener_dict.get(
                'read_buffer_size', defaults.listener.read_buffer_size),
            join_timeout_ms=listener_dict.get(
                'join_timeout_ms', defaults.listener.join_timeout_ms)
        )

        routing_dict = config_dict.get('routing', {})
        routing = RoutingConfig(
            mode=get_enum(RoutingMode, routing_dict.get('mode'), defaults.routing.mode)
        )

        log_dict = config_dict.get('logging', {})
        logging_config = LoggingConfig(
            enabled=log_dict.get('enabled', defaults.logging.enabled),
            level=get_enum(LogLevel, log_dict.get('level'), defaults.logging.level),
            log_to_file=log_dict.get('log_to_file', defaults.logging.log_to_file),
            log_to_console=log_dict.get('log_to_console', defaults.logging.log_to_console),
            log_file_path=log_dict.get('log_file_path', defaults.logging.log_file_path),
            max_file_size_mb=log_dict.get('max_file_size_mb', defaults.logging.max_file_size_mb),
            backup_count=log_dict.get('backup_count', defaults.logging.backup_count)
        )

        return Config(
            serial=serial,
            command=command,
            listener=listener,
            routing=routing,
            logging=logging_config
        )

    def get_config(self) -> Config:
        """Get the loaded configuration.

        Raises:
            RuntimeError: If load() has not been called.
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def validate(self) -> List[str]:
        """Validate the loaded configuration; returns error messages, empty if valid."""
        if self._config is None:
            return ["Configuration not loaded"]

        _, errors = ConfigSchema.validate_config(self._config.to_dict())
        return errors

    def show_config(self) -> Dict[str, Any]:
        """Show the loaded configuration with the source of each value.

        Example:
            {
                "serial": {
                    "port": {"value": "/dev/ttyAMA0", "source": "env"},
                    "baud_rate": {"value": 57600, "source": "file"}
                }
            }
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")

        result: Dict[str, Any] = {}
        for section, section_values in self._config.to_dict().items():
            result[section] = {}
            for key, value in section_values.items():
                result[section][key] = {
                    "value": value,
                    "source": self._config_source.get(f"{section}.{key}", "default")
                }

        return result
