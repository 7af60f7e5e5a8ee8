"""
Document loader for the Lebensmittelkontrolle report page.

Fetches the page, checks that the table header still carries the
expected labels and extracts every body row into a Finding, ordered
by publication date.
"""

from typing import Optional

import structlog
from bs4 import BeautifulSoup, FeatureNotFound, Tag

from lmk_scraper.core.exceptions import ParseError, SchemaError
from lmk_scraper.core.http_client import HttpClient
from lmk_scraper.core.models import Finding
from lmk_scraper.core.normalizer import trim

from .row import RowExtractor, render_markup


SOURCE_URL = "https://verbraucherinfo-bw.de/,Lde/Startseite/Lebensmittelkontrolle"
TABLE_SELECTOR = "#consumerInfoTable"
HEADER_SELECTOR = "thead th p"
ROW_SELECTOR = "tbody tr"
CELL_SELECTOR = "td"

# Decorative link row at the bottom of the table
SENTINEL_TEXT = "Startseite"

# Header labels in column order, as parsed through RowExtractor
HEADER_LABELS = {
    "authority": "Behörde",
    "published_at_raw": "Datum Veröffentlichung",
    "name": "Betriebsbezeichnung",
    "address": "Anschrift",
    "found_at_raw": "Feststellungstag",
    "reason": "Sachverhalt/Grund der Beanstandung",
    "legal_basis": "Rechtsgrundlage",
    "info": "Hinweise zur Mängelbeseitigung und Bemerkungen",
}


def header_labels(header: Finding) -> dict[str, str]:
    """Project a parsed header row onto the label fields."""
    return {field: getattr(header, field) for field in HEADER_LABELS}


def sort_findings(findings: list[Finding]) -> list[Finding]:
    """Stable sort by publication date, unknown dates first."""
    return sorted(findings, key=Finding.sort_key)


class DocumentLoader:
    """
    Loads all findings from the report page.

    Usage:
        async with HttpClient(timeout=10.0) as client:
            findings = await DocumentLoader(client).load()
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        url: str = SOURCE_URL,
        table_selector: str = TABLE_SELECTOR,
        logger: Optional[structlog.typing.FilteringBoundLogger] = None,
    ):
        """
        Initialize loader.

        Args:
            http_client: Entered HttpClient (only needed for load())
            url: Report page URL
            table_selector: CSS selector of the findings table
            logger: Logger to report with (module logger if not provided)
        """
        self.http_client = http_client
        self.url = url
        self.table_selector = table_selector
        self.logger = (logger or structlog.get_logger(__name__)).bind(component="loader")
        self.row_extractor = RowExtractor(logger=self.logger)

    async def load(self) -> list[Finding]:
        """
        Fetch the report page and extract all findings.

        Returns:
            Findings sorted by publication date

        Raises:
            FetchError: If the page cannot be fetched
            ParseError: If the body is not a usable document
            SchemaError: If the table layout or a row is unexpected
        """
        if self.http_client is None:
            raise RuntimeError("No HttpClient given to DocumentLoader.")

        self.logger.info("fetching_page", url=self.url)
        html = await self.http_client.get_text(self.url)
        return self.parse(html)

    def parse(self, html: str) -> list[Finding]:
        """
        Extract all findings from the page markup.

        Args:
            html: Report page HTML

        Returns:
            Findings sorted by publication date
        """
        soup = self._make_soup(html)

        table = soup.select_one(self.table_selector)
        if table is None:
            raise SchemaError(f"table {self.table_selector} not found, has the page design changed?")

        self._check_header(table)

        findings: list[Finding] = []
        skipped = 0
        for row in table.select(ROW_SELECTOR):
            cells = row.select(CELL_SELECTOR)
            if trim("".join(cell.get_text() for cell in cells)) == SENTINEL_TEXT:
                skipped += 1
                continue

            try:
                findings.append(self.row_extractor.extract(cells))
            except SchemaError as e:
                raise SchemaError(
                    f"failed to retrieve item from row {render_markup([row])}",
                    details=str(e),
                ) from e

        self.logger.info("table_loaded", rows=len(findings), skipped=skipped)

        return sort_findings(findings)

    def _make_soup(self, html: str) -> BeautifulSoup:
        """Build the document tree."""
        if not html or not html.strip():
            raise ParseError(f"empty document received from {self.url}")

        try:
            return BeautifulSoup(html, "lxml")
        except (FeatureNotFound, ValueError, TypeError) as e:
            raise ParseError(f"failed to create document: {e}") from e

    def _check_header(self, table: Tag) -> None:
        """
        Compare the header row against HEADER_LABELS.

        The header runs through the same RowExtractor as the data rows,
        so a shifted or renamed column is caught before any row is read.
        """
        try:
            header = self.row_extractor.extract(table.select(HEADER_SELECTOR))
        except SchemaError as e:
            raise SchemaError("failed to retrieve table heading", details=str(e)) from e

        labels = header_labels(header)
        if labels != HEADER_LABELS:
            mismatched = [field for field, label in HEADER_LABELS.items() if labels[field] != label]
            self.logger.error("header_mismatch", fields=mismatched, header=labels)
            raise SchemaError("labels incorrect, has the page design changed?", details=repr(labels))

        self.logger.debug("header_verified")
