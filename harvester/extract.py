# harvester/extract.py
"""Turn one catalog page into raw listing records.

All selector knowledge about the catalog markup lives here; the crawler only
sees ``parse_document`` and ``extract_records``.
"""
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup

from .errors import ParseError
from .normalize import parse_count, parse_rating
from .utils import logger

CELL_SELECTOR = "td.lista"
DETAIL_LINK_SELECTOR = "a[href*='details.php']"
CATEGORY_LINK_SELECTOR = "a[href*='torrents_v2.php?category=']"
IMAGE_SELECTOR = "img.lozad"
IMAGE_ATTR = "data-src"

SIZE_PREFIX = "Velkost"
DATE_PREFIX = "Pridany"
SEEDS_PREFIX = "Odosielaju"
LEECHES_PREFIX = "Stahuju"


@dataclass
class RawListingRecord:
    entry_id: str
    title: str
    url: str
    category: Optional[str] = None
    size_text: str = ""
    date_text: str = ""
    seeds: int = 0
    leeches: int = 0
    image_url: Optional[str] = None
    rating: int = 0
    rating_url: str = ""


def parse_document(body) -> BeautifulSoup:
    if not body or not body.strip():
        raise ParseError("empty document")
    try:
        soup = BeautifulSoup(body, "lxml")
    except Exception as e:
        raise ParseError(f"unparsable document: {e}") from e
    if soup.find() is None:
        raise ParseError("document has no elements")
    return soup


def extract_entry_id(href: str) -> str:
    # details.php?name=...&id=339688748bd23e2ec25945937872287be91343f9
    values = parse_qs(urlparse(href).query).get("id")
    return values[0] if values else ""


def extract_records(soup: BeautifulSoup, page_url: str = "") -> List[RawListingRecord]:
    records = []
    for cell in soup.select(CELL_SELECTOR):
        try:
            record = _extract_cell(cell, page_url)
        except ValueError as e:
            logger.debug("Skipping malformed cell: %s", e)
            continue
        if record is not None:
            records.append(record)
    return records


def _extract_cell(cell, page_url) -> Optional[RawListingRecord]:
    # the poster image is usually wrapped in its own detail link with no text
    link = next((a for a in cell.select(DETAIL_LINK_SELECTOR) if a.get_text(strip=True)), None)
    if link is None:
        return None
    title = link.get_text(strip=True)

    href = link.get("href", "")
    record = RawListingRecord(
        entry_id=extract_entry_id(href),
        title=title,
        url=urljoin(page_url, href) if href else "",
        rating=parse_rating(title),
    )

    category = cell.select_one(CATEGORY_LINK_SELECTOR)
    if category is not None:
        record.category = category.get_text(strip=True) or None

    img = cell.select_one(IMAGE_SELECTOR)
    if img is not None and img.get(IMAGE_ATTR):
        record.image_url = img[IMAGE_ATTR]

    _scan_metadata(cell, record)
    return record


def _scan_metadata(cell, record: RawListingRecord):
    text = cell.get_text("\n")
    if SIZE_PREFIX not in text:
        return

    seen = set()
    for line in text.splitlines():
        line = line.strip()
        for prefix in (SIZE_PREFIX, SEEDS_PREFIX, LEECHES_PREFIX):
            if line.startswith(prefix) and prefix not in seen:
                seen.add(prefix)
                _apply_line(record, prefix, line[len(prefix):])
                break


def _apply_line(record, prefix, value):
    if prefix == SIZE_PREFIX:
        # "Velkost 6.9 GB | Pridany 02/07/2025"
        parts = value.split("|")
        record.size_text = parts[0].strip(" :")
        if len(parts) > 1:
            record.date_text = parts[1].replace(DATE_PREFIX, "", 1).strip(" :")
    elif prefix == SEEDS_PREFIX:
        record.seeds = parse_count(value)
    else:
        record.leeches = parse_count(value)
