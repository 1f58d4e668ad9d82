# harvester/crawl.py
"""Concurrent catalog crawl: fetch -> extract -> enrich per page, then persist
results in ascending page order regardless of which worker finished first."""
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from .db import SessionLocal
from .enrich import DetailEnricher
from .errors import ConfigError, ParseError
from .extract import RawListingRecord, extract_records, parse_document
from .fetch import DEFAULT_USER_AGENT, PageFetcher
from .services import ingest_record
from .utils import logger

load_dotenv()
CATALOG_URL = os.getenv(
    "CATALOG_URL",
    "https://sktorrent.eu/torrent/torrents_v2.php?active=0&order=data&by=DESC&zaner=&jazyk=",
)
USER_AGENT = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)
CRAWL_WORKERS = int(os.getenv("CRAWL_WORKERS", "3"))
CRAWL_TIMEOUT = float(os.getenv("CRAWL_TIMEOUT", "30"))

MAX_WORKERS = 20


@dataclass
class CrawlConfig:
    workers: int = CRAWL_WORKERS
    timeout: float = CRAWL_TIMEOUT
    catalog_url: str = CATALOG_URL
    user_agent: str = USER_AGENT

    @classmethod
    def from_env(cls):
        return cls(
            workers=int(os.getenv("CRAWL_WORKERS", str(CRAWL_WORKERS))),
            timeout=float(os.getenv("CRAWL_TIMEOUT", str(CRAWL_TIMEOUT))),
            catalog_url=os.getenv("CATALOG_URL", CATALOG_URL),
            user_agent=os.getenv("USER_AGENT", USER_AGENT),
        )

    def validate(self):
        if not 1 <= self.workers <= MAX_WORKERS:
            raise ConfigError(f"workers must be between 1 and {MAX_WORKERS}, got {self.workers}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    def page_url(self, page: int) -> str:
        sep = "&" if "?" in self.catalog_url else "?"
        return f"{self.catalog_url}{sep}page={page}"


@dataclass
class PageOutcome:
    page: int
    records: List[RawListingRecord] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass
class CrawlSummary:
    pages: int = 0
    total_records: int = 0
    persisted: int = 0
    workers: int = 0
    errors: Dict[int, str] = field(default_factory=dict)


class Crawler:

    def __init__(self, config: CrawlConfig, session_factory=SessionLocal, fetcher: Optional[PageFetcher] = None):
        config.validate()
        self.config = config
        self.session_factory = session_factory
        self.fetcher = fetcher or PageFetcher(timeout=config.timeout, user_agent=config.user_agent)
        self.enricher = DetailEnricher(self.fetcher)

    def close(self):
        self.fetcher.close()

    def crawl(self, from_page: int, to_page: int) -> CrawlSummary:
        if from_page < 0 or from_page > to_page:
            raise ConfigError(f"invalid page range {from_page}..{to_page}")
        self.config.validate()

        outcomes: Dict[int, PageOutcome] = {}
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = {executor.submit(self.crawl_page, page): page
                       for page in range(from_page, to_page + 1)}
            for future in as_completed(futures):
                outcome = future.result()
                outcomes[outcome.page] = outcome

        return self._persist([outcomes[page] for page in sorted(outcomes)])

    def crawl_page(self, page: int) -> PageOutcome:
        url = self.config.page_url(page)
        logger.info("Processing page %d", page)
        try:
            soup = parse_document(self.fetcher.fetch(url))
            records = extract_records(soup, page_url=url)
            for record in records:
                if record.rating != 0:
                    record.rating_url = self.enricher.enrich(record)
            return PageOutcome(page=page, records=records)
        except (httpx.HTTPError, ParseError) as e:
            logger.warning("Page %d failed: %s", page, e)
            return PageOutcome(page=page, error=e)
        except Exception as e:
            logger.exception("Unexpected failure on page %d: %s", page, e)
            return PageOutcome(page=page, error=e)

    def _persist(self, outcomes: List[PageOutcome]) -> CrawlSummary:
        summary = CrawlSummary(pages=len(outcomes), workers=self.config.workers)
        db = self.session_factory()
        try:
            for outcome in outcomes:
                if outcome.error is not None:
                    logger.error("Error on page %d: %s", outcome.page, outcome.error)
                    summary.errors[outcome.page] = str(outcome.error)
                    continue
                logger.info("Saving page %d - %d records", outcome.page, len(outcome.records))
                for record in outcome.records:
                    try:
                        ingest_record(db, record)
                        summary.persisted += 1
                    except ValueError as e:
                        logger.warning("Skipping record %r: %s", record.title, e)
                    except SQLAlchemyError as e:
                        db.rollback()
                        logger.exception("Failed to save %s: %s", record.entry_id, e)
                summary.total_records += len(outcome.records)
        finally:
            db.close()

        logger.info(
            "Crawl finished: %d records seen, %d saved, %d workers, %d page errors",
            summary.total_records, summary.persisted, summary.workers, len(summary.errors),
        )
        return summary
