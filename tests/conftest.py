"""Shared pytest configuration and fixtures for the nmea_device test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nmea_device.device.parsers.nmea_parser import compute_checksum  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a physical NMEA receiver"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require a physical NMEA receiver",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Sample Data
# =============================================================================

def nmea_sentence(payload: str) -> str:
    """Wrap ``payload`` as ``$payload*HH`` with a valid checksum."""
    return f"${payload}*{compute_checksum(payload):02X}"


SAMPLE_SENTENCES = [
    nmea_sentence("GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,47.0,M,,"),
    nmea_sentence("GPGSV,3,1,11,03,03,111,00,04,15,270,00,06,01,010,00,13,06,292,00"),
    nmea_sentence("GPGSV,3,2,11,14,25,170,00,16,57,208,39,18,67,296,40,19,40,246,00"),
    nmea_sentence("GPGSV,3,3,11,22,42,067,42,24,14,311,43,27,05,244,00,,,,"),
    nmea_sentence("GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W"),
    "not an nmea sentence",
]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_sentences() -> list[str]:
    """Sentences written to ``sample_nmea_log``, in file order."""
    return list(SAMPLE_SENTENCES)


@pytest.fixture
def sample_nmea_log(tmp_path) -> Path:
    """Write a short recorded session: GGA, a 3-part GSV cycle, RMC and one junk line."""
    path = tmp_path / "sample_track.nmea"
    path.write_text("\r\n".join(SAMPLE_SENTENCES) + "\r\n", encoding="ascii")
    return path


@pytest.fixture
def config_file(tmp_path):
    """Factory writing a ``key = value`` config file and returning its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "device.txt"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
