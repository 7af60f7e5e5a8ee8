"""
Parsers - table extraction for the report page.

- row: RowExtractor, one table row to one Finding
- table: DocumentLoader, page fetch, header check and row ordering
"""

from .row import RowExtractor
from .table import DocumentLoader, HEADER_LABELS

__all__ = ["RowExtractor", "DocumentLoader", "HEADER_LABELS"]
