"""
Lebensmittelkontrolle scraper - food-safety inspection findings for
Baden-Württemberg.

Architecture:
- core/: Stable foundation (models, errors, HTTP client, normalizer, deduplication)
- parsers/: Row and table extraction from the report page
- config/: YAML settings with environment overrides
- output: JSON lines and table rendering
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
