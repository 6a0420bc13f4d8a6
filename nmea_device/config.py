"""Typed configuration for an NMEA device and factories built on it."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union, get_type_hints

from nmea_device.core.config_loader import load_config_values
from nmea_device.core.logging_utils import get_module_logger
from nmea_device.device.constants import (
    DEFAULT_BAUD_RATE,
    DEFAULT_MAX_BUFFER_CHARS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_READ_CHUNK_SIZE,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_TCP_PORT,
)
from nmea_device.device.lifecycle import NmeaDevice
from nmea_device.device.transports import (
    BaseStreamTransport,
    FileStreamTransport,
    SerialStreamTransport,
    TcpStreamTransport,
)

logger = get_module_logger("DeviceConfig")

TRANSPORT_KINDS = ("serial", "tcp", "file")


@dataclass(slots=True)
class DeviceConfig:
    """Typed configuration for one NMEA device."""

    # Transport selection
    transport: str = "serial"

    # Serial configuration
    serial_port: str = "/dev/ttyUSB0"
    baud_rate: int = DEFAULT_BAUD_RATE

    # TCP configuration
    host: str = "localhost"
    tcp_port: int = DEFAULT_TCP_PORT

    # File replay
    file_path: str = ""
    file_loop: bool = False
    file_chunk_delay_s: float = 0.0

    # Read loop
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE
    read_timeout_s: float = DEFAULT_READ_TIMEOUT
    poll_interval_s: float = DEFAULT_POLL_INTERVAL
    error_backoff_s: float = 0.0
    max_buffer_chars: int = DEFAULT_MAX_BUFFER_CHARS

    # Dispatch
    report_parse_failures: bool = True
    restart_on_first_part: bool = False

    # Logging
    log_level: str = "info"
    log_file: str = ""

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "DeviceConfig":
        """Build config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        config = cls(**{key: value for key, value in values.items() if key in known})
        config.validate()
        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "DeviceConfig":
        """Load a ``key = value`` config file on top of the defaults.

        Each value is converted to the annotated type of its field.

        Raises:
            ValueError: A value does not fit its field, or the result fails ``validate``.
        """
        values = load_config_values(Path(config_path), _field_types(cls))
        return cls.from_dict(values)

    def apply_args_override(self, args: Any) -> "DeviceConfig":
        """Return a copy with non-None CLI argument values applied."""
        values = asdict(self)

        arg_mappings = {
            "transport": "transport",
            "port": "serial_port",
            "baud": "baud_rate",
            "host": "host",
            "tcp_port": "tcp_port",
            "file": "file_path",
            "loop": "file_loop",
            "log_level": "log_level",
            "log_file": "log_file",
        }

        for arg_name, config_key in arg_mappings.items():
            if hasattr(args, arg_name):
                val = getattr(args, arg_name)
                if val is not None:
                    values[config_key] = val

        return DeviceConfig.from_dict(values)

    def validate(self) -> None:
        """Raise ValueError for settings the device cannot run with."""
        self.transport = self.transport.lower()
        if self.transport not in TRANSPORT_KINDS:
            raise ValueError(
                f"Unsupported transport '{self.transport}' (expected one of {', '.join(TRANSPORT_KINDS)})"
            )
        if self.transport == "file" and not self.file_path:
            raise ValueError("file transport requires file_path")
        if self.read_chunk_size < 1:
            raise ValueError("read_chunk_size must be at least 1")
        if self.read_timeout_s <= 0:
            raise ValueError("read_timeout_s must be positive")
        if self.poll_interval_s < 0:
            raise ValueError("poll_interval_s must not be negative")

    def to_dict(self) -> dict[str, Any]:
        """Export config values as dictionary."""
        return asdict(self)


def _field_types(config_cls: type) -> dict[str, type]:
    hints = get_type_hints(config_cls)
    return {f.name: hints[f.name] for f in fields(config_cls)}


def build_transport(config: DeviceConfig) -> BaseStreamTransport:
    """Create the transport selected by ``config.transport``."""
    kind = config.transport.lower()
    if kind == "serial":
        return SerialStreamTransport(config.serial_port, config.baud_rate)
    if kind == "tcp":
        return TcpStreamTransport(config.host, config.tcp_port)
    if kind == "file":
        return FileStreamTransport(
            config.file_path,
            loop=config.file_loop,
            chunk_delay=config.file_chunk_delay_s,
        )
    raise ValueError(f"Unsupported transport '{config.transport}'")


def create_device(config: DeviceConfig, transport: Optional[BaseStreamTransport] = None, **kwargs: Any) -> NmeaDevice:
    """Create an ``NmeaDevice`` wired from ``config``.

    ``kwargs`` are passed through to ``NmeaDevice`` (e.g. a custom ``parser``).
    """
    return NmeaDevice(
        transport or build_transport(config),
        read_chunk_size=config.read_chunk_size,
        read_timeout=config.read_timeout_s,
        poll_interval=config.poll_interval_s,
        error_backoff=config.error_backoff_s,
        report_parse_failures=config.report_parse_failures,
        restart_on_first_part=config.restart_on_first_part,
        max_buffer_chars=config.max_buffer_chars or None,
        **kwargs,
    )


__all__ = ["DeviceConfig", "TRANSPORT_KINDS", "build_transport", "create_device"]
