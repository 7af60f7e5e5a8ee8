"""
Exception taxonomy for the scraper.

Every fatal kind derives from ScraperError so the CLI can log and exit
with a single handler.
"""

from typing import Optional


class ScraperError(Exception):
    """Base exception for scraper failures"""
    pass


class ConfigError(ScraperError):
    """Raised when settings cannot be loaded or are invalid"""
    pass


class FetchError(ScraperError):
    """Raised when the report page cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0):
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(ScraperError):
    """Raised when the fetched body cannot be turned into a document"""
    pass


class SchemaError(ScraperError):
    """Raised when the table layout or a row does not match expectations.

    Attributes:
        details -- rendered markup (or parsed header) of the offending part
    """

    def __init__(self, message: str, details: Optional[str] = None):
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
        self.details = details


class StoreError(ScraperError):
    """Raised when the SQLite history cannot be opened or initialized"""
    pass
