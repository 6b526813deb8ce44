"""Default configuration values.

The defaults match the RN2483 power-on UART settings and the response
timing the module needs, so a link works without any config file.
"""

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


def get_default_config() -> Config:
    """Get default configuration.

    Default Values:
        - Serial: 9600 baud 8N1, no flow control, 100 ms read timeout
        - Command: 5 s response deadline polled every 100 ms
        - Listener: 10 ms idle wait, 1024-byte reads, 1 s join on close
        - Routing: dual delivery to response and observer
        - Logging: disabled; INFO level to console when enabled
    """
    return Config(
        serial=SerialConfig(
            port=None,
            baud_rate=9600,  # module power-on rate; boards are often set to 57600
            data_bits=8,
            stop_bits=1,
            parity="N",
            flow_control=False,
            read_timeout_ms=100,
            write_timeout_ms=0,
            settle_delay_ms=100
        ),
        command=CommandConfig(
            response_timeout_ms=5000,
            poll_interval_ms=100
        ),
        listener=ListenerConfig(
            idle_sleep_ms=10,
            read_buffer_size=1024,
            join_timeout_ms=1000
        ),
        routing=RoutingConfig(
            mode=RoutingMode.DUAL
        ),
        logging=LoggingConfig(
            enabled=False,
            level=LogLevel.INFO,
            log_to_file=False,
            log_to_console=True,
            log_file_path=None,
            max_file_size_mb=10,
            backup_count=5
        )
    )
