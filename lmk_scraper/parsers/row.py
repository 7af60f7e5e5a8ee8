"""
Row extraction for the inspection table.

Turns the cells of one table row into a Finding. Used for both the
header row (layout check) and every body row.
"""

from typing import Optional, Sequence

import structlog
from bs4 import Tag

from lmk_scraper.core.exceptions import SchemaError
from lmk_scraper.core.models import Finding
from lmk_scraper.core.normalizer import (
    DATE_PASSES,
    FOUND_AT_PASSES,
    apply_passes,
    parse_date,
    trim,
)


COLUMN_COUNT = 8

# Column positions as published on the page
AUTHORITY, PUBLISHED_AT, NAME, ADDRESS, FOUND_AT, REASON, LEGAL_BASIS, INFO = range(COLUMN_COUNT)

# Stacked dates in the found-at column live in a sub-paragraph
FOUND_AT_INNER_SELECTOR = ".text p"
LINE_BREAK = "<br/>"


def inner_html(tag: Tag) -> str:
    """Render the markup inside a tag."""
    return "".join(str(child) for child in tag.contents)


def render_markup(cells: Sequence[Tag]) -> str:
    """Render cells for error messages."""
    try:
        return "".join(str(cell) for cell in cells)
    except (RecursionError, TypeError, ValueError) as e:
        return f"failed to render markup: {e}"


class RowExtractor:
    """
    Extracts Finding objects from table row cells.

    Expects eight cells. Rows without the trailing remarks column
    (seven cells) get an empty info field.
    """

    def __init__(self, logger: Optional[structlog.typing.FilteringBoundLogger] = None):
        self.logger = (logger or structlog.get_logger(__name__)).bind(component="row_extractor")

    def extract(self, cells: Sequence[Tag]) -> Finding:
        """
        Extract a finding from a row.

        Args:
            cells: Column elements in document order

        Returns:
            Finding with raw strings set and dates parsed where possible

        Raises:
            SchemaError: On an unexpected column count or a malformed date
        """
        texts = self._cell_texts(cells)

        found_at_raw = self._found_at_text(cells[FOUND_AT], texts[FOUND_AT])

        published_at_raw = trim(apply_passes(texts[PUBLISHED_AT], DATE_PASSES))
        found_at_raw = trim(apply_passes(found_at_raw, FOUND_AT_PASSES))

        return Finding(
            authority=texts[AUTHORITY],
            published_at_raw=published_at_raw,
            found_at_raw=found_at_raw,
            name=texts[NAME],
            address=texts[ADDRESS],
            reason=texts[REASON],
            legal_basis=texts[LEGAL_BASIS],
            info=texts[INFO],
            published_at=parse_date(published_at_raw, "published at", self.logger),
            found_at=parse_date(found_at_raw, "found at", self.logger),
        )

    def _cell_texts(self, cells: Sequence[Tag]) -> list[str]:
        """Trimmed plain text per column, padded to eight columns."""
        texts = [trim(cell.get_text()) for cell in cells]

        if len(texts) != COLUMN_COUNT:
            if len(texts) != COLUMN_COUNT - 1:
                raise SchemaError(
                    f"invalid number of parts found {len(texts)}/{COLUMN_COUNT}",
                    details=render_markup(cells),
                )
            # Some rows omit the remarks column entirely
            texts.append("")

        return texts

    def _found_at_text(self, cell: Tag, text: str) -> str:
        """
        Prefer the inner markup of the found-at cell when it holds
        several dates separated by line breaks.
        """
        inner = cell.select_one(FOUND_AT_INNER_SELECTOR)
        if inner is None:
            return text

        markup = inner_html(inner)
        if "." not in markup:
            return text

        self.logger.debug("found_at_from_markup", markup=markup)
        return markup.replace(LINE_BREAK, " / ")
