"""Read-loop defaults and NMEA framing constants."""

# Read loop
DEFAULT_READ_CHUNK_SIZE = 1024
DEFAULT_READ_TIMEOUT = 1.0  # seconds; bounds how long close() waits on an in-flight read
DEFAULT_POLL_INTERVAL = 0.01  # seconds between read-loop iterations

# Framing
LINE_TERMINATOR = "\n"
DEFAULT_MAX_BUFFER_CHARS = 64 * 1024

# NMEA 0183
SENTENCE_START_CHARS = ("$", "!")
CHECKSUM_DELIMITER = "*"

# Sentence ids whose first two fields are (total parts, part number)
MULTIPART_SENTENCE_IDS = frozenset({"GSV", "RTE"})

# Serial defaults (NMEA 0183 is specified at 4800 baud)
DEFAULT_BAUD_RATE = 4800
DEFAULT_TCP_PORT = 10110

# Event queue adapter
DEFAULT_EVENT_QUEUE_SIZE = 1000
