"""JSON Schema validation for the RN2483 link configuration.

Provides the schema definition and validation with messages naming the
section, the field and an example of a valid value.
"""

import copy
from typing import List, Tuple, Dict, Any

import jsonschema
from jsonschema import Draft7Validator


class ConfigSchema:
    """Configuration schema validator using JSON Schema Draft 7.

    Example:
        >>> is_valid, errors = ConfigSchema.validate_config({"serial": {"baud_rate": 57600}})
        >>> is_valid
        True
    """

    # Baud rates the RN2483 UART accepts after auto-baud detection
    VALID_BAUD_RATES = [1200, 2400, 4800, 9600, 19200, 38400, 57600, 115200]

    EXAMPLES = {
        "port": "'/dev/ttyAMA0'",
        "baud_rate": "57600",
        "data_bits": "8",
        "stop_bits": "1",
        "parity": "'N'",
        "flow_control": "false",
        "read_timeout_ms": "100",
        "write_timeout_ms": "0",
        "settle_delay_ms": "100",
        "response_timeout_ms": "5000",
        "poll_interval_ms": "100",
        "idle_sleep_ms": "10",
        "read_buffer_size": "1024",
        "join_timeout_ms": "1000",
        "mode": "dual",
        "enabled": "true",
        "level": "INFO",
        "log_to_file": "true",
        "log_to_console": "true",
        "log_file_path": "'./logs/rn2483.log'",
        "max_file_size_mb": "10",
        "backup_count": "5",
    }

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """Get the JSON Schema Draft 7 document for the configuration."""
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "RN2483 Link Configuration",
            "type": "object",
            "properties": {
                "serial": {
                    "type": "object",
                    "description": "Serial port settings",
                    "properties": {
                        "port": {"type": ["string", "null"]},
                        "baud_rate": {
                            "type": "integer",
                            "enum": ConfigSchema.VALID_BAUD_RATES
                        },
                        "data_bits": {"type": "integer", "enum": [5, 6, 7, 8]},
                        "stop_bits": {"type": "number", "enum": [1, 1.5, 2]},
                        "parity": {"type": "string", "enum": ["N", "E", "O", "M", "S"]},
                        "flow_control": {"type": "boolean"},
                        "read_timeout_ms": {"type": "integer", "minimum": 1, "maximum": 10000},
                        "write_timeout_ms": {"type": "integer", "minimum": 0, "maximum": 60000},
                        "settle_delay_ms": {"type": "integer", "minimum": 0, "maximum": 10000}
                    },
                    "additionalProperties": False
                },
                "command": {
                    "type": "object",
                    "description": "Command/response timing",
                    "properties": {
                        "response_timeout_ms": {"type": "integer", "minimum": 1, "maximum": 600000},
                        "poll_interval_ms": {"type": "integer", "minimum": 1, "maximum": 10000}
                    },
                    "additionalProperties": False
                },
                "listener": {
                    "type": "object",
                    "description": "Background listener settings",
                    "properties": {
                        "idle_sleep_ms": {"type": "integer", "minimum": 1, "maximum": 1000},
                        "read_buffer_size": {"type": "integer", "minimum": 1, "maximum": 65536},
                        "join_timeout_ms": {"type": "integer", "minimum": 0, "maximum": 60000}
                    },
                    "additionalProperties": False
                },
                "routing": {
                    "type": "object",
                    "description": "Line routing between responses and observers",
                    "properties": {
                        "mode": {"type": "string", "enum": ["dual", "exclusive"]}
                    },
                    "additionalProperties": False
                },
                "logging": {
                    "type": "object",
                    "description": "Communication logging settings",
                    "properties": {
                        "enabled": {"type": "boolean"},
                        "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                        "log_to_file": {"type": "boolean"},
                        "log_to_console": {"type": "boolean"},
                        "log_file_path": {"type": ["string", "null"]},
                        "max_file_size_mb": {"type": "number", "exclusiveMinimum": 0, "maximum": 1000},
                        "backup_count": {"type": "integer", "minimum": 0, "maximum": 100}
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        }

    @staticmethod
    def validate_config(config: Dict[str, Any], strict: bool = True) -> Tuple[bool, List[str]]:
        """Validate a configuration dictionary.

        Args:
            config: Configuration dictionary to validate
            strict: If False, unknown fields are accepted

        Returns:
            Tuple of (is_valid, error_messages)

        Example:
            >>> ConfigSchema.validate_config({"serial": {"baud_rate": 12345}})[0]
            False
        """
        schema = ConfigSchema.get_schema()
        if not strict:
            schema = ConfigSchema._make_permissive(schema)

        validator = Draft7Validator(schema)
        errors = [ConfigSchema._format_error(error)
                  for error in sorted(validator.iter_errors(config), key=lambda e: list(e.path))]
        errors.extend(ConfigSchema._custom_validation(config))
        return len(errors) == 0, errors

    @staticmethod
    def _make_permissive(schema: Dict[str, Any]) -> Dict[str, Any]:
        permissive_schema = copy.deepcopy(schema)

        def remove_additional_properties(obj):
            if isinstance(obj, dict):
                obj.pop("additionalProperties", None)
                for value in obj.values():
                    remove_additional_properties(value)

        remove_additional_properties(permissive_schema)
        return permissive_schema

    @staticmethod
    def _format_error(error: jsonschema.exceptions.ValidationError) -> str:
        """Format a validation error as "Section 's', field 'f': problem. Example: f: v"."""
        path = [str(p) for p in error.path]

        if error.validator == "additionalProperties":
            where = f"Section '{path[0]}'" if path else "Top level"
            return f"{where}: {error.message}"

        if len(path) >= 2:
            section, field = path[0], path[1]
            example = ConfigSchema.EXAMPLES.get(field)
            message = f"Section '{section}', field '{field}': {ConfigSchema._describe(error)}"
            if example is not None:
                message += f". Example: {field}: {example}"
            return message

        if len(path) == 1:
            return f"Section '{path[0]}': {ConfigSchema._describe(error)}"

        return ConfigSchema._describe(error)

    @staticmethod
    def _describe(error: jsonschema.exceptions.ValidationError) -> str:
        if error.validator == "enum":
            return f"Expected one of {error.validator_value}, got {error.instance!r}"
        if error.validator == "type":
            return f"Expected type {error.validator_value}, got {type(error.instance).__name__}"
        if error.validator in ("minimum", "exclusiveMinimum"):
            return f"Value {error.instance} is below the minimum {error.validator_value}"
        if error.validator == "maximum":
            return f"Value {error.instance} exceeds the maximum {error.validator_value}"
        return error.message

    @staticmethod
    def _custom_validation(config: Dict[str, Any]) -> List[str]:
        """Cross-field checks the schema cannot express."""
        errors = []

        logging_section = config.get("logging")
        if isinstance(logging_section, dict):
            if logging_section.get("log_to_file") and not logging_section.get("log_file_path"):
                errors.append(
                    "Section 'logging', field 'log_file_path': required when log_to_file is "
                    "true. Example: log_file_path: './logs/rn2483.log'"
                )
            path = logging_section.get("log_file_path")
            if isinstance(path, str) and not ConfigSchema.validate_path(path):
                errors.append(
                    f"Section 'logging', field 'log_file_path': Path {path!r} "
                    f"contains invalid characters. Example: log_file_path: './logs/rn2483.log'"
                )

        command_section = config.get("command")
        if isinstance(command_section, dict):
            timeout = command_section.get("response_timeout_ms")
            poll = command_section.get("poll_interval_ms")
            if isinstance(timeout, int) and isinstance(poll, int) and poll > timeout:
                errors.append(
                    "Section 'command', field 'poll_interval_ms': must not exceed "
                    f"response_timeout_ms ({timeout}). Example: poll_interval_ms: 100"
                )

        return errors

    @staticmethod
    def validate_baud_rate(baud: int) -> bool:
        """Check a baud rate against the rates the module supports.

        Example:
            >>> ConfigSchema.validate_baud_rate(57600)
            True
            >>> ConfigSchema.validate_baud_rate(12345)
            False
        """
        return baud in ConfigSchema.VALID_BAUD_RATES

    @staticmethod
    def validate_path(path: str) -> bool:
        """Reject empty paths and paths containing NUL or line breaks."""
        if not path or path.strip() == "":
            return False
        return not any(char in path for char in ('\0', '\r', '\n'))
