"""End-to-end fixtures for tests that talk to a physical NMEA receiver.

Set ``NMEA_TEST_PORT`` (and optionally ``NMEA_TEST_BAUD``) to point the tests
at a receiver, then run with ``--run-hardware``.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture
def receiver_port() -> str:
    """Serial port of the receiver under test."""
    port = os.environ.get("NMEA_TEST_PORT", "/dev/ttyUSB0")
    if not port.startswith(("loop://", "socket://", "rfc2217://")) and not Path(port).exists():
        pytest.skip(f"No receiver at {port}")
    return port


@pytest.fixture
def receiver_baud() -> int:
    return int(os.environ.get("NMEA_TEST_BAUD", "9600"))


@pytest.fixture
def data_timeout() -> float:
    """Seconds to wait for the receiver to produce data."""
    return float(os.environ.get("NMEA_TEST_TIMEOUT", "10"))
