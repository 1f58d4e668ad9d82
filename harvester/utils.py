# harvester/utils.py
"""Shared utilities: logging setup and the clock used for stored timestamps."""
import os
import logging
from datetime import datetime, timezone
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("harvester")

def utcnow() -> datetime:
    # naive UTC; SQLite has no timezone-aware datetime storage
    return datetime.now(timezone.utc).replace(tzinfo=None)
