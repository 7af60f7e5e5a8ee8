"""
Run orchestration for the scraper.

Coordinates:
- Page fetch and table extraction
- Optional deduplication against the SQLite history
- Output generation
"""

import sys
from typing import Optional, TextIO

import httpx
import structlog

from .config.loader import Settings
from .core.deduplicator import DeduplicationStore
from .core.http_client import HttpClient
from .core.models import Finding
from .output import render_table, write_ndjson
from .parsers.table import DocumentLoader


class Scraper:
    """
    Orchestrator for one scraper run.

    Fetches all findings, optionally narrows them to the ones not seen
    in earlier runs and prints them.
    """

    def __init__(
        self,
        settings: Settings,
        logger: Optional[structlog.typing.FilteringBoundLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize scraper.

        Args:
            settings: Run settings
            logger: Logger handed to every component
            transport: Optional httpx transport for the page fetch
        """
        self.settings = settings
        self.logger = logger or structlog.get_logger(__name__)
        self.transport = transport

        self.stats = {
            "findings_loaded": 0,
            "findings_new": None,
            "findings_printed": 0,
        }

    async def collect(self, new_only: bool = False) -> list[Finding]:
        """
        Load findings and optionally deduplicate them.

        Args:
            new_only: Keep only findings not stored by an earlier run

        Returns:
            Findings in publication order
        """
        async with HttpClient(
            timeout=self.settings.request_timeout,
            transport=self.transport,
            logger=self.logger,
        ) as client:
            loader = DocumentLoader(
                client,
                url=self.settings.source_url,
                table_selector=self.settings.table_selector,
                logger=self.logger,
            )
            findings = await loader.load()

        self.stats["findings_loaded"] = len(findings)

        if new_only:
            with DeduplicationStore(self.settings.sqlite_file, logger=self.logger) as store:
                findings = store.filter_new(findings)
            self.stats["findings_new"] = len(findings)

        return findings

    def emit(
        self,
        findings: list[Finding],
        as_json: bool = False,
        stream: Optional[TextIO] = None,
    ) -> None:
        """
        Print findings as JSON lines or as a table.

        Args:
            findings: Findings to print
            as_json: JSON lines instead of the table
            stream: Target stream (stdout if not provided)
        """
        stream = stream or sys.stdout
        if as_json:
            write_ndjson(findings, stream)
        else:
            render_table(
                findings,
                show_details=self.settings.table_show_details,
                max_width=self.settings.table_max_width,
                stream=stream,
            )
        self.stats["findings_printed"] = len(findings)

    async def run(
        self,
        new_only: bool = False,
        as_json: bool = False,
        stream: Optional[TextIO] = None,
    ) -> list[Finding]:
        """
        Run the pipeline end to end.

        Nothing is printed unless loading (and deduplication) succeeded.

        Returns:
            Findings that were printed
        """
        self.logger.info("starting_run", new_only=new_only, as_json=as_json)

        findings = await self.collect(new_only=new_only)
        self.emit(findings, as_json=as_json, stream=stream)

        self.logger.info("run_complete", **self.stats)
        return findings
