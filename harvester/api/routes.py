# harvester/api/routes.py
import base64
import binascii
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..crawl import CrawlConfig, Crawler
from ..db import get_db, get_session_factory
from ..errors import ConfigError
from ..utils import logger

router = APIRouter()


def encode_cursor(offset: int) -> str:
    return base64.urlsafe_b64encode(f"offset:{offset}".encode()).decode()


def decode_cursor(cursor: str) -> int:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        prefix, _, value = raw.partition(":")
        if prefix != "offset":
            raise ValueError(raw)
        return int(value)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid cursor")


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/entries", response_model=schemas.EntryPage)
def entries(
    offset: int = 0,
    limit: int = 20,
    after: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: schemas.SortKey = schemas.SortKey.NEWEST,
    db: Session = Depends(get_db)
):
    if after:
        offset = decode_cursor(after)
    page = crud.paginate(db, offset=offset, limit=limit, category=category, search=search, sort_key=sort)
    if page.has_more:
        page.next_cursor = encode_cursor(max(offset, 0) + len(page.items))
    return page


@router.get("/entries/recent", response_model=List[schemas.EntryWithStats])
def recent_entries(limit: int = 50, db: Session = Depends(get_db)):
    return crud.recent(db, limit=limit)


@router.get("/entries/search", response_model=List[schemas.EntryWithStats])
def search_entries(q: str, limit: int = 50, fulltext: bool = False, db: Session = Depends(get_db)):
    if fulltext:
        return crud.full_text_search(db, q, limit=limit)
    return crud.search(db, q, limit=limit)


@router.get("/entries/category/{category}", response_model=List[schemas.EntryWithStats])
def category_entries(category: str, limit: int = 50, db: Session = Depends(get_db)):
    return crud.by_category(db, category, limit=limit)


@router.get("/entries/rating/{fragment}", response_model=List[schemas.EntryWithStats])
def rating_entries(fragment: str, limit: int = 50, db: Session = Depends(get_db)):
    return crud.by_rating_url(db, fragment, limit=limit)


@router.get("/entries/{entry_id}", response_model=schemas.EntryWithStats)
def get_entry(entry_id: str, db: Session = Depends(get_db)):
    obj = crud.current_stats_for(db, entry_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Entry not found")
    return obj


@router.get("/entries/{entry_id}/history", response_model=List[schemas.StatsSampleOut])
def entry_history(entry_id: str, limit: int = 100, db: Session = Depends(get_db)):
    if crud.get_entry(db, entry_id) is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return crud.stats_history(db, entry_id, limit=limit)


@router.get("/stats", response_model=schemas.StoreStats)
def store_stats(db: Session = Depends(get_db)):
    return crud.aggregate_stats(db)


@router.post("/crawl", response_model=schemas.CrawlReport)
def trigger_crawl(
    from_page: int = 0,
    to_page: int = 0,
    workers: Optional[int] = None,
    session_factory=Depends(get_session_factory)
):
    config = CrawlConfig.from_env()
    if workers is not None:
        config.workers = workers
    try:
        crawler = Crawler(config, session_factory=session_factory)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        summary = crawler.crawl(from_page, to_page)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Crawl failed: %s", e)
        raise HTTPException(status_code=500, detail="Crawl failed")
    finally:
        crawler.close()
    return schemas.CrawlReport(
        pages=summary.pages,
        total_records=summary.total_records,
        persisted=summary.persisted,
        workers=summary.workers,
        errors=summary.errors,
    )
