"""
Output rendering for findings.

- Newline-delimited JSON, one finding per line
- Bordered table for terminals (rich)
"""

import json
import sys
from typing import Iterable, Optional, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .core.models import Finding


TABLE_TITLE = "Lebensmittelkontrolle"
TABLE_MAX_WIDTH = 42
ELLIPSIS = "…"

SUMMARY_COLUMNS = [
    "Behörde",
    "Datum Veröffentlichung",
    "Feststellungstag",
    "Betriebsbezeichnung",
    "Anschrift",
]
DETAIL_COLUMNS = [
    "Sachverhalt/Grund der Beanstandung",
    "Rechtsgrundlage",
    "Hinweise zur Mängelbeseitigung und Bemerkungen",
]


def capstring(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def write_ndjson(findings: Iterable[Finding], stream: Optional[TextIO] = None) -> int:
    """
    Write findings as JSON lines.

    Args:
        findings: Findings to write
        stream: Target stream (stdout if not provided)

    Returns:
        Number of lines written
    """
    stream = stream or sys.stdout
    count = 0
    for finding in findings:
        stream.write(json.dumps(finding.to_dict(), ensure_ascii=False) + "\n")
        count += 1
    stream.flush()
    return count


def table_columns(show_details: bool = True) -> list[str]:
    """Column headers after the index column."""
    return SUMMARY_COLUMNS + (DETAIL_COLUMNS if show_details else [])


def table_width(row_count: int, show_details: bool = True, max_width: int = TABLE_MAX_WIDTH) -> int:
    """
    Widest line the table can render to.

    Each column takes its header or a capped cell plus the ellipsis,
    two characters of padding and one border. Sizing the console to
    this means cells never wrap, whatever the terminal width.
    """
    widths = [max(len("#"), len(str(row_count)))]
    widths += [max(len(column), max_width + len(ELLIPSIS)) for column in table_columns(show_details)]
    return sum(width + 3 for width in widths) + 1


def build_table(
    findings: Iterable[Finding],
    show_details: bool = True,
    max_width: int = TABLE_MAX_WIDTH,
) -> Table:
    """
    Build the findings table.

    Date columns show the raw page text, so unparsed dates stay visible.
    """
    table = Table(title=TABLE_TITLE, box=box.SQUARE, show_lines=True)

    table.add_column("#", justify="right", no_wrap=True)
    for column in table_columns(show_details):
        table.add_column(column, no_wrap=True)

    for index, finding in enumerate(findings, start=1):
        values = [
            finding.authority,
            finding.published_at_raw,
            finding.found_at_raw,
            finding.name,
            finding.address,
        ]
        if show_details:
            values += [finding.reason, finding.legal_basis, finding.info]

        table.add_row(str(index), *(Text(capstring(v, max_width)) for v in values))

    return table


def render_table(
    findings: Iterable[Finding],
    console: Optional[Console] = None,
    show_details: bool = True,
    max_width: int = TABLE_MAX_WIDTH,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Print findings as a bordered table.

    Args:
        findings: Findings to print
        console: Target console (built for stream if not provided)
        show_details: Include reason, legal basis and remarks columns
        max_width: Maximum characters per cell before truncation
        stream: Target stream when no console is given (stdout if not provided)
    """
    findings = list(findings)
    if console is None:
        console = Console(
            file=stream or sys.stdout,
            highlight=False,
            width=table_width(len(findings), show_details, max_width),
        )
    console.print(build_table(findings, show_details=show_details, max_width=max_width))
