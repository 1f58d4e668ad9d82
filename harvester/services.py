# harvester/services.py
from sqlalchemy.orm import Session

from . import crud
from .extract import RawListingRecord
from .normalize import parse_added_date, parse_size
from .utils import logger


def entry_payload(record: RawListingRecord) -> dict:
    return {
        "id": record.entry_id,
        "name": record.title,
        "category": record.category,
        "size_mb": parse_size(record.size_text),
        "added_date": parse_added_date(record.date_text),
        "url": record.url,
        "image_url": record.image_url,
        "rating": record.rating,
        "rating_url": record.rating_url,
    }


def ingest_record(db: Session, record: RawListingRecord) -> str:
    """Upsert the entry, then append one stats sample for this crawl pass."""
    if not record.entry_id:
        raise ValueError(f"no identifier in detail link for {record.title!r}")
    crud.upsert_entry(db, entry_payload(record))
    crud.record_stats(db, record.entry_id, record.seeds, record.leeches)
    logger.debug("Ingested entry %s", record.entry_id)
    return record.entry_id
