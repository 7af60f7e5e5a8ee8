"""
Data models for the Lebensmittelkontrolle scraper.

A Finding is one row of the published inspection table.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional


def date_to_timestamp(value: Optional[date]) -> str:
    """
    Render a calendar date as an ISO-8601 UTC midnight timestamp.

    An absent date renders as the zero timestamp 0001-01-01T00:00:00Z,
    so every record carries a parseable timestamp.
    """
    return f"{(value or date.min).isoformat()}T00:00:00Z"


@dataclass(frozen=True)
class Finding:
    """
    One food-safety inspection finding.

    Raw date strings are always kept; the parsed dates are only set
    when the raw text was a DD.MM.YYYY date.
    """

    authority: str
    published_at_raw: str
    found_at_raw: str
    name: str
    address: str
    reason: str
    legal_basis: str
    info: str = ""

    published_at: Optional[date] = None
    found_at: Optional[date] = None

    def sort_key(self) -> date:
        """Ordering key by publication date; unknown dates sort first."""
        return self.published_at or date.min

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "authority": self.authority,
            "published_at": date_to_timestamp(self.published_at),
            "found_at": date_to_timestamp(self.found_at),
            "name": self.name,
            "address": self.address,
            "reason": self.reason,
            "legal_basis": self.legal_basis,
            "info": self.info,
        }

    def to_canonical_dict(self) -> dict:
        """All fields, raw strings included, with dates as ISO strings."""
        data = {}
        for k, v in asdict(self).items():
            if isinstance(v, date):
                data[k] = v.isoformat()
            else:
                data[k] = v
        return data
