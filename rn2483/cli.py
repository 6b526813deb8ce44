"""RN2483 link command-line interface.

Discover serial ports, send commands to the module and watch the lines it
emits asynchronously.
"""

import argparse
import dataclasses
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rn2483.config import ConfigManager, Config, LogLevel
from rn2483.core import Connection, SerialHandler
from rn2483.logging import CommunicationLogger


def discover_ports() -> int:
    """Discover and display available serial ports."""
    print("Discovering serial ports...")
    ports = SerialHandler.discover_ports()

    if not ports:
        print("No serial ports found.")
        return 0

    print(f"\nFound {len(ports)} port(s):")
    for port in ports:
        print(f"  {port.device}")
        print(f"    Description: {port.description}")
        print(f"    Hardware ID: {port.hwid}")
        print()
    return 0


def show_config_command(manager: ConfigManager) -> int:
    """Print the loaded configuration and where each value came from."""
    config_dict = manager.show_config()

    print("\n" + "=" * 70)
    print("  Current Configuration")
    if manager.config_path:
        print(f"  File: {manager.config_path}")
    print("=" * 70)

    for section, values in config_dict.items():
        print(f"\n{section.capitalize()} Settings:")
        for key, entry in values.items():
            print(f"  {key}: {entry['value']} (source: {entry['source']})")

    print()
    return 0


def validate_config_command(config_path: Optional[str]) -> int:
    """Load and validate the configuration, listing every problem found."""
    print("\n" + "=" * 70)
    print("  Configuration Validation")
    print("=" * 70)

    try:
        ConfigManager().load(config_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"\n[ERROR] {e}\n")
        return 1

    print("\n[OK] Configuration is valid\n")
    return 0


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return config with command-line options applied on top."""
    serial = config.serial
    if args.port:
        serial = dataclasses.replace(serial, port=args.port)
    if args.baud:
        serial = dataclasses.replace(serial, baud_rate=args.baud)

    command = config.command
    if args.timeout is not None:
        command = dataclasses.replace(command, response_timeout_ms=int(args.timeout * 1000))

    return dataclasses.replace(config, serial=serial, command=command)


def build_logger(config: Config, args: argparse.Namespace) -> Optional[CommunicationLogger]:
    """Create the communication logger from --log options or the config file."""
    if not args.log:
        return CommunicationLogger.from_config(config.logging)

    log_file_path = args.log_file
    if not log_file_path:
        log_dir = Path.home() / ".rn2483" / "logs"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file_path = str(log_dir / f"link_{timestamp}.log")

    return CommunicationLogger(
        log_level=LogLevel[args.log_level],
        enable_file=True,
        enable_console=args.log_to_console,
        log_file_path=log_file_path,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count
    )


def run_session(
    connection: Connection,
    commands: List[str],
    expect_response: bool,
    listen_seconds: float,
    verbose: bool
) -> int:
    """Connect, send each command, then optionally keep listening.

    Returns:
        Exit code (0 if connected and every command succeeded, 1 otherwise)
    """
    connection.set_message_callback(lambda line: print(f"[async] {line}"))
    if verbose:
        connection.set_debug_callback(lambda line: print(line, file=sys.stderr))

    if not connection.connect():
        error = connection.last_error
        print(f"Error: could not connect{f': {error}' if error else ''}", file=sys.stderr)
        return 1

    exit_code = 0
    for command in commands:
        response = connection.send(command, expect_response=expect_response)

        print(f"\n{'='*60}")
        print(f"Command: {response.command}")
        print(f"Status: {response.status.value}")
        print(f"Execution time: {response.execution_time:.3f}s")
        if response.error_message:
            print(f"Error: {response.error_message}")
        print(f"\nResponse:")
        print(response.get_response_text())
        print(f"{'='*60}\n")

        if not response.is_successful():
            exit_code = 1

    if listen_seconds > 0:
        print(f"Listening for {listen_seconds:g}s (Ctrl+C to stop)...")
        deadline = time.monotonic() + listen_seconds
        while time.monotonic() < deadline and connection.is_connected():
            time.sleep(min(0.1, max(0.0, deadline - time.monotonic())))
        if not connection.is_connected():
            print("Connection lost while listening", file=sys.stderr)
            exit_code = 1

    return exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rn2483",
        description="RN2483 LoRa module link over a serial port",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --discover-ports
  %(prog)s --port /dev/ttyAMA0 --baud 57600 --command "sys get ver"
  %(prog)s --port /dev/ttyAMA0 --command "mac pause" --command "radio rx 0" --listen 60
  %(prog)s --port /dev/ttyAMA0 --command "sys get ver" --log --log-level DEBUG --log-to-console
  %(prog)s --config ./rn2483.yaml --show-config
        """
    )

    parser.add_argument(
        '--discover-ports',
        action='store_true',
        help='Discover and list available serial ports'
    )

    parser.add_argument(
        '--port',
        type=str,
        help='Serial port device (e.g., /dev/ttyAMA0, COM3)'
    )

    parser.add_argument(
        '--baud',
        type=int,
        help='Baud rate (default: from config, 9600)'
    )

    parser.add_argument(
        '--command',
        type=str,
        action='append',
        default=[],
        help='Command to send, e.g. "sys get ver" (repeatable)'
    )

    parser.add_argument(
        '--no-response',
        action='store_true',
        help='Do not wait for a response after each command'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Response timeout in seconds (default: from config, 5)'
    )

    parser.add_argument(
        '--listen',
        type=float,
        default=0.0,
        metavar='SECONDS',
        help='Keep printing asynchronous lines for SECONDS after the commands'
    )

    parser.add_argument(
        '--config',
        type=str,
        metavar='PATH',
        help='Configuration file (default: ./rn2483.yaml or ~/.rn2483/config.yaml)'
    )

    parser.add_argument(
        '--show-config',
        action='store_true',
        help='Show current configuration with sources'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Validate configuration file'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print the timestamped link trace to stderr'
    )

    # Logging arguments
    parser.add_argument(
        '--log',
        action='store_true',
        help='Enable communication logging'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        metavar='PATH',
        help='Path to log file (default: ~/.rn2483/logs/link_YYYYMMDD_HHMMSS.log)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Log level (default: INFO)'
    )

    parser.add_argument(
        '--log-to-console',
        action='store_true',
        help='Output logs to console (stderr) in addition to file'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.validate_config:
        return validate_config_command(args.config)

    if args.discover_ports:
        return discover_ports()

    manager = ConfigManager()
    try:
        config = manager.load(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: failed to load configuration: {e}", file=sys.stderr)
        return 1

    if args.show_config:
        return show_config_command(manager)

    if not args.command and args.listen <= 0:
        parser.print_help()
        return 0

    config = apply_overrides(config, args)
    if not config.serial.port:
        print("Error: --port is required (or set serial.port in the config)", file=sys.stderr)
        return 1

    try:
        logger = build_logger(config, args)
    except (OSError, ValueError) as e:
        print(f"Warning: Failed to initialize logger: {e}", file=sys.stderr)
        logger = None

    try:
        with Connection(config, logger=logger) as connection:
            exit_code = run_session(
                connection,
                commands=args.command,
                expect_response=not args.no_response,
                listen_seconds=args.listen,
                verbose=args.verbose
            )
        if logger and args.verbose and logger.log_file_path:
            print(f"\nLog file: {logger.log_file_path}")
        return exit_code
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1
    finally:
        if logger:
            logger.close()


if __name__ == '__main__':
    sys.exit(main())
