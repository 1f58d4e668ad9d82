# harvester/enrich.py
import httpx

from .errors import ParseError
from .extract import RawListingRecord, parse_document
from .fetch import PageFetcher
from .utils import logger

# tried in order, first match wins
RATING_LINK_SELECTORS = (
    'a[itemprop="sameAs"][href*="csfd.cz"]',
    'a[href*="csfd.cz/film/"]',
    'a[href*="csfd.sk/film/"]',
)


class DetailEnricher:
    """Resolve the outbound rating-site link from an item's detail page."""

    def __init__(self, fetcher: PageFetcher):
        self.fetcher = fetcher

    def enrich(self, record: RawListingRecord) -> str:
        if record.rating == 0 or not record.url:
            return ""
        try:
            soup = parse_document(self.fetcher.fetch(record.url))
        except (httpx.HTTPError, ParseError) as e:
            logger.debug("Enrichment failed for %s: %s", record.url, e)
            return ""
        for selector in RATING_LINK_SELECTORS:
            link = soup.select_one(selector)
            if link is not None and link.get("href"):
                return link["href"]
        return ""
