"""Shared fixtures for scraper tests."""

from pathlib import Path

import pytest
import structlog
from bs4 import BeautifulSoup

from lmk_scraper.parsers.table import HEADER_LABELS


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fixture_html():
    """Report page with a header, three data rows and the Startseite row."""
    return (FIXTURES_DIR / "lmk_page.html").read_text(encoding="utf-8")


def _make_cells(*values):
    """Build <td> elements from inner HTML snippets."""
    row = "".join(f"<td>{v}</td>" for v in values)
    soup = BeautifulSoup(f"<table><tr>{row}</tr></table>", "lxml")
    return soup.select("td")


def _make_page(rows, labels=None):
    """Build a report page from header labels and rows of cell snippets."""
    labels = list(labels or HEADER_LABELS.values())
    header = "".join(f"<th><p>{label}</p></th>" for label in labels)
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>"
        for row in rows
    )
    return (
        "<html><body>"
        '<table id="consumerInfoTable">'
        f"<thead><tr>{header}</tr></thead>"
        f"<tbody>{body}</tbody>"
        "</table>"
        "</body></html>"
    )


def _data_row(published_at="15.04.2025", found_at="02.04.2025", name="Bäckerei Sonnenschein", info="erledigt"):
    """Eight cell snippets for one well-formed row."""
    return [
        "Landratsamt Karlsruhe",
        published_at,
        name,
        "Hauptstraße 12, 76131 Karlsruhe",
        found_at,
        "Mängel bei der Betriebshygiene",
        "Art. 4 Abs. 2 VO (EG) Nr. 852/2004",
        info,
    ]


@pytest.fixture
def make_cells():
    return _make_cells


@pytest.fixture
def make_page():
    return _make_page


@pytest.fixture
def data_row():
    return _data_row


class BrokenStream:
    """Text stream whose writes fail like a closed pipe."""

    def write(self, text):
        raise BrokenPipeError(32, "Broken pipe")

    def flush(self):
        pass


@pytest.fixture
def broken_stream():
    return BrokenStream()
