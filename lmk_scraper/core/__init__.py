"""
Core layer - stable foundation for the scraper.

Components:
- models: Finding dataclass
- exceptions: FetchError, ParseError, SchemaError, StoreError, ConfigError
- http_client: Timeout-bounded HTTP client
- normalizer: Cell trimming and date cleanup passes
- deduplicator: Hash-based SQLite history
"""

from .models import Finding
from .exceptions import (
    ScraperError,
    ConfigError,
    FetchError,
    ParseError,
    SchemaError,
    StoreError,
)
from .normalizer import (
    trim,
    disambiguate_date,
    parse_date,
    apply_passes,
    NormalizationPass,
    DATE_PASSES,
    FOUND_AT_PASSES,
)
from .deduplicator import (
    DeduplicationStore,
    InsertOutcome,
    generate_content_hash,
    is_unique_violation,
)

__all__ = [
    "Finding",
    "ScraperError",
    "ConfigError",
    "FetchError",
    "ParseError",
    "SchemaError",
    "StoreError",
    "trim",
    "disambiguate_date",
    "parse_date",
    "apply_passes",
    "NormalizationPass",
    "DATE_PASSES",
    "FOUND_AT_PASSES",
    "DeduplicationStore",
    "InsertOutcome",
    "generate_content_hash",
    "is_unique_violation",
]
