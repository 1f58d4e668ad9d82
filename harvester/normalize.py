# harvester/normalize.py
"""Field normalization for catalog listings.

Every function here degrades instead of raising: a field that cannot be
understood becomes 0 (sizes, ratings, counters) or the current time (dates),
so one bad field never throws away an otherwise usable record.
"""
import re
from datetime import datetime
from typing import Optional

from .utils import logger, utcnow

_SIZE_RE = re.compile(r"([0-9.]+)\s*(KB|MB|GB|TB)", re.I)
_RATING_RE = re.compile(r"=\s*CSFD\s*(\d+)%")
_COUNT_RE = re.compile(r"-?\d+")

# strptime accepts both 2/7/2025 and 02/07/2025 for %d/%m
DATE_LAYOUTS = (
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%d/%m/%y",
)

_UNIT_FACTORS = {
    "KB": 1 / 1024,
    "MB": 1,
    "GB": 1024,
    "TB": 1024 * 1024,
}


def size_to_mb(quantity, unit: str) -> float:
    factor = _UNIT_FACTORS.get((unit or "").strip().upper())
    if factor is None:
        return 0.0
    try:
        value = float(quantity)
    except (TypeError, ValueError):
        return 0.0
    if value < 0:
        return 0.0
    return value * factor


def parse_size(text: Optional[str]) -> float:
    """Parse text like "6.9 GB" into megabytes; 0.0 when unrecognized."""
    if not text:
        return 0.0
    m = _SIZE_RE.search(text)
    if not m:
        logger.debug("Unrecognized size text %r", text)
        return 0.0
    return size_to_mb(m.group(1), m.group(2))


def parse_added_date(text: Optional[str], now: Optional[datetime] = None) -> datetime:
    text = (text or "").strip()
    for layout in DATE_LAYOUTS:
        try:
            return datetime.strptime(text, layout)
        except ValueError:
            continue
    logger.debug("Unparsable date %r, using current time", text)
    return now or utcnow()


def parse_rating(title: Optional[str]) -> int:
    m = _RATING_RE.search(title or "")
    return int(m.group(1)) if m else 0


def parse_count(text: Optional[str]) -> int:
    """First integer in a counter line value, e.g. " : 12" -> 12."""
    m = _COUNT_RE.search(text or "")
    if not m:
        return 0
    return max(int(m.group(0)), 0)
