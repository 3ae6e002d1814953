"""Parser for human-readable byte sizes such as ``1 MiB`` or ``1.5gb``."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .exceptions import ConfigError

INVALID_LIMIT = "the file size limit specified in the config is invalid"

NUMERIC_CHARS = "0123456789."
UNIT_CHARS = "bkmgi"

UNITS = {
    '': 1,
    'b': 1,
    'kb': 10 ** 3,
    'kib': 2 ** 10,
    'mb': 10 ** 6,
    'mib': 2 ** 20,
    'gb': 10 ** 9,
    'gib': 2 ** 30,
}


def parse_size_limit(text: str) -> int:
    """
    Parse a size string into an exact number of bytes.

    Args:
        text: Number with an optional unit, e.g. ``10mb`` or ``1 KiB``

    Returns:
        Byte count, rounded to the nearest integer

    Raises:
        ConfigError: If the string is malformed
    """
    number = []
    unit = []
    for char in text.strip().lower():
        if char in NUMERIC_CHARS:
            if unit:
                raise ConfigError(INVALID_LIMIT, causes=[f"unexpected '{char}' after unit in {text!r}"])
            number.append(char)
        elif char in UNIT_CHARS:
            unit.append(char)
        elif char.isspace() and not unit:
            continue
        else:
            raise ConfigError(INVALID_LIMIT, causes=[f"unexpected '{char}' in {text!r}"])

    if not number:
        raise ConfigError(INVALID_LIMIT, causes=[f"no number in {text!r}"])
    try:
        value = Decimal(''.join(number))
    except InvalidOperation as e:
        raise ConfigError.wrap(e, INVALID_LIMIT) from e

    multiplier = UNITS.get(''.join(unit))
    if multiplier is None:
        raise ConfigError(INVALID_LIMIT, causes=[f"unknown unit '{''.join(unit)}'"])

    return int((value * multiplier).to_integral_value(rounding=ROUND_HALF_UP))


def resolve_size_limit(text: Optional[str]) -> Optional[int]:
    """Parse a configured limit, passing ``None`` (no limit) through."""
    if text is None:
        return None
    return parse_size_limit(text)
