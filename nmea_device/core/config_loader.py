"""Reader for ``key = value`` device config files.

Values are typed by the config dataclass: each known key is converted to the
annotated type of its field. Unknown keys are reported and skipped; a value
that cannot be converted is an error naming the file line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Mapping

from nmea_device.core.logging_utils import get_module_logger

logger = get_module_logger(__name__)

TRUE_WORDS = ("true", "yes", "on", "1")
FALSE_WORDS = ("false", "no", "off", "0")


def read_config_entries(config_path: Path) -> Iterator[tuple[int, str, str]]:
    """Yield ``(line_number, key, raw_value)`` for each setting in the file.

    Blank lines and ``#`` comments are skipped, trailing comments are cut and
    surrounding quotes are removed from the value.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                logger.warning("Invalid config line %d (missing '='): %s", line_num, line)
                continue

            key, value = line.split("=", 1)
            value = value.split("#", 1)[0].strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]
            yield line_num, key.strip(), value


def parse_config_value(raw: str, target_type: type) -> Any:
    """Convert ``raw`` to ``target_type`` (bool, int, float or str).

    Raises:
        ValueError: ``raw`` is not a valid ``target_type``.
    """
    if target_type is bool:
        word = raw.lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
        raise ValueError(f"'{raw}' is not a boolean")
    if target_type is int:
        # decimal, hex (0x...), octal (0o...), binary (0b...)
        return int(raw, 0)
    if target_type is float:
        return float(raw)
    if target_type is str:
        return raw
    raise ValueError(f"Unsupported config type {target_type!r}")


def load_config_values(config_path: Path, field_types: Mapping[str, type]) -> dict[str, Any]:
    """Read the settings in ``config_path`` that name a field in ``field_types``.

    A missing file yields an empty mapping.

    Raises:
        ValueError: A value cannot be converted to its field's type.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        logger.debug("Config file not found at %s, using defaults", config_path)
        return {}

    values: dict[str, Any] = {}
    for line_num, key, raw in read_config_entries(config_path):
        target_type = field_types.get(key)
        if target_type is None:
            logger.warning("Unknown config key '%s' (line %d) ignored", key, line_num)
            continue
        try:
            values[key] = parse_config_value(raw, target_type)
        except ValueError as exc:
            raise ValueError(f"{config_path}:{line_num}: invalid value for {key}: {exc}") from exc

    logger.info("Loaded config from %s (%d values)", config_path, len(values))
    return values


__all__ = ["load_config_values", "parse_config_value", "read_config_entries"]
