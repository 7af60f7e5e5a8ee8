"""
Normalization utilities for the inspection table cells.

Handles:
- Trimming cell text (space, tab, CR, LF only)
- Reducing messy date cells to their first date
  (27.03.2025 / 28.03.2025, 10.06.2025 und 25.06.2025, ...)
- Parsing DD.MM.YYYY dates
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

import structlog

from .exceptions import SchemaError


TRIM_CHARS = " \t\r\n"

# ASCII digits only
DATE_PATTERN = re.compile(r"^([0-9]{2})\.([0-9]{2})\.([0-9]{4})$")

STRAY_SUFFIX_PATTERN = re.compile(r"(?<=[0-9])[ \t\r\n]*z$")


def trim(text: str) -> str:
    """Strip leading/trailing space, tab, carriage return and newline."""
    return text.strip(TRIM_CHARS)


def prefix_before(delimiter: str) -> Callable[[str], str]:
    """Build a pass keeping the trimmed text before the first delimiter."""

    def cut(text: str) -> str:
        return trim(text.split(delimiter, 1)[0])

    return cut


def strip_stray_suffix(text: str) -> str:
    """Drop a stray trailing "z" typed after a date (12.03.2025z, 12.03.2025 z)."""
    return trim(STRAY_SUFFIX_PATTERN.sub("", trim(text)))


@dataclass(frozen=True)
class NormalizationPass:
    """A named cleanup step applied to a raw date cell."""
    name: str
    func: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.func(text)


DATE_PASSES: tuple[NormalizationPass, ...] = (
    NormalizationPass("split_slash", prefix_before("/")),  # 27.03.2025 / 28.03.2025
    NormalizationPass("split_und", prefix_before(" und ")),  # 10.06.2025 und 25.06.2025
    NormalizationPass("split_bis", prefix_before(" bis ")),  # 10.06.2025 bis 25.06.2025
    NormalizationPass("split_comma", prefix_before(", ")),  # 09.12.2025, 10.12.2025
)

FOUND_AT_PASSES: tuple[NormalizationPass, ...] = (
    NormalizationPass("strip_stray_suffix", strip_stray_suffix),
    *DATE_PASSES,
)


def apply_passes(text: str, passes: Sequence[NormalizationPass]) -> str:
    """Run the given passes over text, in order."""
    for normalization in passes:
        text = normalization(text)
    return text


def disambiguate_date(text: str) -> str:
    """
    Reduce a date cell to its first date token.

    Args:
        text: Raw cell text, possibly a range or list of dates

    Returns:
        Prefix holding the first date (or the text unchanged)
    """
    return apply_passes(text, DATE_PASSES)


def parse_date(
    text: str,
    field: str,
    logger: Optional[structlog.typing.FilteringBoundLogger] = None,
) -> Optional[date]:
    """
    Parse a DD.MM.YYYY date.

    Text without a "." is not a date at all (placeholders, notes) and
    yields None. Text with a "." must be a valid date.

    Args:
        text: Raw date string
        field: Field name used in the error message
        logger: Logger for rejected calendar dates (module logger if not provided)

    Returns:
        date object or None

    Raises:
        SchemaError: If the text looks like a date but isn't one
    """
    logger = logger or structlog.get_logger(__name__)

    text = trim(text)
    if "." not in text:
        return None

    match = DATE_PATTERN.match(text)
    if match:
        day, month, year = match.groups()
        try:
            return date(int(year), int(month), int(day))
        except ValueError as e:
            logger.debug("invalid_date", field=field, text=text, error=str(e))

    raise SchemaError(f"failed to parse {field} {text!r}")
