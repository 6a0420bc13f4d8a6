"""Unit tests for the NMEA line parser."""

import pytest

from nmea_device.device.errors import NmeaChecksumError, NmeaParseError
from nmea_device.device.parsers.nmea_parser import compute_checksum, parse_line, validate_checksum
from nmea_device.device.parsers.nmea_types import MultiPartFacet, NmeaMessage


GGA = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,47.0,M,,*47"
RMC = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"


def sentence(payload: str, start: str = "$") -> str:
    return f"{start}{payload}*{compute_checksum(payload):02X}"


class TestChecksum:
    """Test checksum helpers."""

    def test_known_sentences_validate(self):
        assert validate_checksum(GGA) is True
        assert validate_checksum(RMC) is True

    def test_wrong_checksum(self):
        assert validate_checksum(GGA[:-2] + "00") is False

    def test_missing_checksum(self):
        assert validate_checksum("$GPGGA,123519") is False

    def test_not_a_sentence(self):
        assert validate_checksum("GPGGA*47") is False

    def test_compute_checksum_is_xor(self):
        assert compute_checksum("") == 0
        assert compute_checksum("A") == ord("A")
        assert compute_checksum("AA") == 0


class TestParseLine:
    """Test envelope parsing."""

    def test_parses_header_and_fields(self):
        message = parse_line(GGA)
        assert isinstance(message, NmeaMessage)
        assert message.message_type == "GPGGA"
        assert message.talker_id == "GP"
        assert message.sentence_id == "GGA"
        assert message.fields[0] == "123519"
        assert message.fields[-1] == ""
        assert message.checksum == 0x47
        assert message.raw == GGA
        assert message.multipart is None
        assert message.is_multipart is False

    def test_checksum_optional(self):
        message = parse_line("$GPGGA,123519,4807.038,N")
        assert message.checksum is None
        assert message.fields == ("123519", "4807.038", "N")

    def test_empty_checksum_after_delimiter(self):
        message = parse_line("$AA,1,3*")
        assert message.message_type == "AA"
        assert message.checksum is None
        assert message.fields == ("1", "3")

    def test_lowercase_checksum(self):
        payload = "GPZDA,201530.00,04,07,2002,00,00"
        line = f"${payload}*{compute_checksum(payload):02x}"
        assert parse_line(line).message_type == "GPZDA"

    def test_encapsulated_sentence(self):
        line = sentence("AIVDM,1,1,,A,13aEOK?P00PD2wVMdLDRhgvL289?,0", start="!")
        message = parse_line(line)
        assert message.message_type == "AIVDM"
        assert message.multipart is None

    def test_proprietary_sentence(self):
        message = parse_line(sentence("PGRME,15.0,M,45.0,M,25.0,M"))
        assert message.message_type == "PGRME"
        assert message.talker_id == ""
        assert message.sentence_id == "PGRME"

    def test_checksum_mismatch_raises(self):
        with pytest.raises(NmeaChecksumError) as excinfo:
            parse_line(GGA[:-2] + "00")
        assert excinfo.value.expected == 0
        assert excinfo.value.actual == 0x47

    def test_checksum_error_is_parse_error(self):
        with pytest.raises(NmeaParseError):
            parse_line(RMC[:-2] + "FF")

    def test_malformed_checksum(self):
        with pytest.raises(NmeaParseError):
            parse_line("$GPGGA,1*ZZ")

    @pytest.mark.parametrize("line", ["", "GPGGA,1,2", "hello", "$", "$,1,2"])
    def test_rejects_non_sentences(self, line):
        with pytest.raises(NmeaParseError):
            parse_line(line)

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_line("garbage")


class TestMultiPartFacet:
    """Test multi-part detection."""

    def test_gsv_gets_facet(self):
        message = parse_line(sentence("GPGSV,3,2,11,14,25,170,00,16,57,208,39,18,67,296,40,19,40,246,00"))
        assert message.multipart == MultiPartFacet(sequence_number=2, total_parts=3)
        assert message.is_multipart is True

    def test_other_talkers_gsv(self):
        message = parse_line(sentence("GLGSV,2,1,08,65,30,045,25"))
        assert message.message_type == "GLGSV"
        assert message.multipart == MultiPartFacet(sequence_number=1, total_parts=2)

    def test_rte_gets_facet(self):
        message = parse_line(sentence("GPRTE,2,1,c,0,PBRCPK,PBRTO,PTELGR,PPLAND"))
        assert message.multipart == MultiPartFacet(sequence_number=1, total_parts=2)

    def test_gsv_without_counters_rejected(self):
        with pytest.raises(NmeaParseError):
            parse_line(sentence("GPGSV,3"))

    def test_gsv_non_numeric_counters_rejected(self):
        with pytest.raises(NmeaParseError):
            parse_line(sentence("GPGSV,x,1,11"))

    def test_facet_helpers(self):
        first = MultiPartFacet(sequence_number=1, total_parts=3)
        last = MultiPartFacet(sequence_number=3, total_parts=3)
        assert first.is_first and not first.is_last
        assert last.is_last and last.is_valid
        assert not MultiPartFacet(sequence_number=4, total_parts=3).is_valid
