"""End-to-end tests against a real receiver.

Hardware Requirements:
    - USB or UART GPS receiver outputting NMEA 0183

Usage:
    NMEA_TEST_PORT=/dev/ttyACM0 pytest tests/e2e/ --run-hardware -v -s
"""

from __future__ import annotations

import pytest

from nmea_device.config import DeviceConfig, create_device
from nmea_device.device.events import MessageReceived
from nmea_device.device.tests.fakes import wait_until


@pytest.mark.hardware
@pytest.mark.slow
class TestReceiverEndToEnd:
    """Open a live receiver and check what comes out of the pipeline."""

    @pytest.mark.asyncio
    async def test_receives_sentences(self, receiver_port, receiver_baud, data_timeout):
        config = DeviceConfig(serial_port=receiver_port, baud_rate=receiver_baud)
        device = create_device(config)
        received = []
        device.events.subscribe(received.append, MessageReceived)

        async with device:
            await wait_until(lambda: len(received) >= 10, timeout=data_timeout)

        types = {event.message.sentence_id for event in received}
        print(f"\nSentence types seen: {sorted(types)}")
        assert types & {"GGA", "RMC", "VTG", "GSA", "GSV", "GLL"}

    @pytest.mark.asyncio
    async def test_gsv_cycle_completes(self, receiver_port, receiver_baud, data_timeout):
        """Receivers emit GSV every fix; at least one full cycle should arrive."""
        config = DeviceConfig(serial_port=receiver_port, baud_rate=receiver_baud)
        device = create_device(config)
        completed = []
        device.events.subscribe(
            lambda event: completed.append(event) if event.message_parts else None,
            MessageReceived,
        )

        async with device:
            await wait_until(lambda: completed, timeout=data_timeout)

        parts = completed[0].message_parts
        assert [part.multipart.sequence_number for part in parts] == list(range(1, len(parts) + 1))
