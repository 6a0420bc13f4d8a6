"""Console monitor: open a device from config and print what it receives.

    python -m nmea_device --transport serial --port /dev/ttyUSB0 --baud 4800
    python -m nmea_device --config device.txt --duration 30
    python -m nmea_device --transport file --file track.nmea
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from pathlib import Path
from typing import Optional

from nmea_device.config import TRANSPORT_KINDS, DeviceConfig, create_device
from nmea_device.core.logging_config import configure_logging
from nmea_device.core.logging_utils import get_module_logger
from nmea_device.device.errors import NmeaDeviceError
from nmea_device.device.events import DeviceEvent, MessageReceived, ParseFailure, TransportError

logger = get_module_logger("Monitor")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Print NMEA sentences and completed multi-part groups")
    parser.add_argument("--config", type=Path, help="key = value config file")
    parser.add_argument("--transport", choices=TRANSPORT_KINDS, help="Byte source")
    parser.add_argument("--port", help="Serial port path or pyserial URL")
    parser.add_argument("--baud", type=int, help="Serial baud rate")
    parser.add_argument("--host", help="TCP host")
    parser.add_argument("--tcp-port", dest="tcp_port", type=int, help="TCP port")
    parser.add_argument("--file", help="NMEA log file to replay")
    parser.add_argument("--loop", action="store_true", default=None, help="Loop file replay")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (debug, info, ...)")
    parser.add_argument("--log-file", dest="log_file", help="Also log to this file")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    return parser.parse_args(argv)


def _print_event(event: DeviceEvent) -> None:
    if isinstance(event, MessageReceived):
        if event.message_parts is not None:
            print(f"{event.message.message_type} cycle complete ({len(event.message_parts)} parts)")
            for part in event.message_parts:
                print(f"    {getattr(part, 'raw', part)}")
        elif not event.is_multipart:
            print(getattr(event.message, "raw", event.message))
    elif isinstance(event, TransportError):
        print(f"! transport error: {event.error}", file=sys.stderr)
    elif isinstance(event, ParseFailure):
        print(f"? {event.line}", file=sys.stderr)


async def run(config: DeviceConfig, duration: Optional[float] = None) -> int:
    device = create_device(config)
    device.events.subscribe(_print_event)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    try:
        await device.open()
    except NmeaDeviceError as exc:
        logger.error("%s", exc)
        return 1

    try:
        if duration is not None:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=duration)
        else:
            await stop_event.wait()
    finally:
        await device.close()

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = DeviceConfig.from_file(args.config) if args.config else DeviceConfig()
        config = config.apply_args_override(args)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    configure_logging(config.log_level, log_file=config.log_file or None)
    logger.debug("Config: %s", config.to_dict())
    return asyncio.run(run(config, args.duration))


if __name__ == "__main__":
    sys.exit(main())
