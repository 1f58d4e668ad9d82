# harvester/crud.py
"""Store operations for `Entry` and `StatsSample` entities.

Writes commit per call. Reads join each entry with its latest stats sample
(ranked by recency); entries without samples report zero seeds/leeches.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Integer, column, func, literal_column, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from . import schemas
from .models import Entry, StatsSample
from .schemas import SortKey
from .utils import utcnow

DEFAULT_LIMIT = 50
DEFAULT_HISTORY_LIMIT = 100
DEFAULT_PAGE_SIZE = 20

ENTRY_FIELDS = ("id", "name", "category", "size_mb", "added_date", "url",
                "image_url", "rating", "rating_url")


def upsert_entry(db: Session, data: Dict[str, Any]):
    now = utcnow()
    values = {k: data.get(k) for k in ENTRY_FIELDS}
    values["size_mb"] = max(values["size_mb"] or 0.0, 0.0)
    values["rating"] = values["rating"] or 0
    values["rating_url"] = values["rating_url"] or ""
    values["created_at"] = now
    values["updated_at"] = now

    table = Entry.__table__
    stmt = sqlite_insert(table).values(**values)
    # copy every column from EXCLUDED except the identity and first-seen stamp
    excluded = {c.name: stmt.excluded[c.name] for c in table.columns if c.name not in ("id", "created_at")}
    stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=excluded)
    db.execute(stmt)
    db.commit()


def record_stats(db: Session, entry_id: str, seeds: int, leeches: int,
                 recorded_at: Optional[datetime] = None):
    db.add(StatsSample(
        entry_id=entry_id,
        seeds=seeds,
        leeches=leeches,
        recorded_at=recorded_at or utcnow(),
    ))
    db.commit()


def _latest_stats():
    ranked = select(
        StatsSample.entry_id,
        StatsSample.seeds,
        StatsSample.leeches,
        func.row_number().over(
            partition_by=StatsSample.entry_id,
            order_by=(StatsSample.recorded_at.desc(), StatsSample.id.desc()),
        ).label("rn"),
    ).subquery("ranked")
    return select(ranked.c.entry_id, ranked.c.seeds, ranked.c.leeches).where(ranked.c.rn == 1).subquery("latest")


def _with_stats_query():
    latest = _latest_stats()
    seeds = func.coalesce(latest.c.seeds, 0)
    leeches = func.coalesce(latest.c.leeches, 0)
    stmt = (
        select(Entry, seeds.label("seeds"), leeches.label("leeches"))
        .outerjoin(latest, latest.c.entry_id == Entry.id)
    )
    return stmt, seeds, leeches


def _to_schema(row) -> schemas.EntryWithStats:
    entry, seeds, leeches = row
    out = schemas.EntryWithStats.model_validate(entry)
    out.seeds = seeds
    out.leeches = leeches
    return out


def _fetch(db: Session, stmt) -> List[schemas.EntryWithStats]:
    return [_to_schema(row) for row in db.execute(stmt).all()]


def get_entry(db: Session, entry_id: str):
    return db.query(Entry).filter(Entry.id == entry_id).first()


def current_stats_for(db: Session, entry_id: str) -> Optional[schemas.EntryWithStats]:
    stmt, _, _ = _with_stats_query()
    row = db.execute(stmt.where(Entry.id == entry_id)).first()
    return _to_schema(row) if row else None


def _search_filter(query: str):
    term = f"%{query}%"
    return Entry.name.like(term) | Entry.category.like(term)


def search(db: Session, query: str, limit: int = DEFAULT_LIMIT):
    if limit <= 0:
        limit = DEFAULT_LIMIT
    stmt, _, _ = _with_stats_query()
    stmt = stmt.where(_search_filter(query)).order_by(Entry.updated_at.desc()).limit(limit)
    return _fetch(db, stmt)


def by_category(db: Session, category: str, limit: int = DEFAULT_LIMIT):
    if limit <= 0:
        limit = DEFAULT_LIMIT
    stmt, _, _ = _with_stats_query()
    stmt = stmt.where(Entry.category == category).order_by(Entry.updated_at.desc()).limit(limit)
    return _fetch(db, stmt)


def recent(db: Session, limit: int = DEFAULT_LIMIT):
    if limit <= 0:
        limit = DEFAULT_LIMIT
    stmt, _, _ = _with_stats_query()
    return _fetch(db, stmt.order_by(Entry.updated_at.desc()).limit(limit))


def by_rating_url(db: Session, fragment: str, limit: int = DEFAULT_LIMIT):
    """Entries whose rating link contains ``fragment`` (e.g. a rating-site film id)."""
    if limit <= 0:
        limit = DEFAULT_LIMIT
    stmt, _, _ = _with_stats_query()
    stmt = stmt.where(Entry.rating_url.like(f"%{fragment}%")).order_by(Entry.updated_at.desc()).limit(limit)
    return _fetch(db, stmt)


def full_text_search(db: Session, query: str, limit: int = DEFAULT_LIMIT):
    """Token search over the FTS5 shadow index of name/category."""
    if limit <= 0:
        limit = DEFAULT_LIMIT
    # quote each token so user input is never read as FTS5 query syntax
    terms = " ".join('"{}"'.format(t.replace('"', '""')) for t in query.split())
    if not terms:
        return []
    matches = text("SELECT rowid FROM entries_fts WHERE entries_fts MATCH :q").bindparams(q=terms)
    stmt, _, _ = _with_stats_query()
    stmt = (
        stmt.where(literal_column("entries.rowid").in_(matches.columns(column("rowid", Integer))))
        .order_by(Entry.updated_at.desc())
        .limit(limit)
    )
    return _fetch(db, stmt)


def stats_history(db: Session, entry_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[StatsSample]:
    if limit <= 0:
        limit = DEFAULT_HISTORY_LIMIT
    stmt = (
        select(StatsSample)
        .where(StatsSample.entry_id == entry_id)
        .order_by(StatsSample.recorded_at.desc(), StatsSample.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt))


def _order_by(sort_key, seeds, leeches):
    orders = {
        SortKey.OLDEST: Entry.updated_at.asc(),
        SortKey.NAME_ASC: Entry.name.asc(),
        SortKey.NAME_DESC: Entry.name.desc(),
        SortKey.SIZE_ASC: Entry.size_mb.asc(),
        SortKey.SIZE_DESC: Entry.size_mb.desc(),
        SortKey.SEEDS_DESC: seeds.desc(),
        SortKey.LEECHES_DESC: leeches.desc(),
    }
    return orders.get(sort_key, Entry.updated_at.desc()), Entry.id.asc()


def paginate(db: Session, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE,
             category: Optional[str] = None, search: Optional[str] = None,
             sort_key: SortKey = SortKey.NEWEST) -> schemas.EntryPage:
    if limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    if offset < 0:
        offset = 0

    # search takes precedence; category applies only without a search term
    conds = []
    if search:
        conds.append(_search_filter(search))
    elif category:
        conds.append(Entry.category == category)

    stmt, seeds, leeches = _with_stats_query()
    count_stmt = select(func.count()).select_from(Entry)
    for cond in conds:
        stmt = stmt.where(cond)
        count_stmt = count_stmt.where(cond)

    total = db.execute(count_stmt).scalar_one()
    # one extra row tells us whether another page exists
    stmt = stmt.order_by(*_order_by(sort_key, seeds, leeches)).offset(offset).limit(limit + 1)
    items = _fetch(db, stmt)
    has_more = len(items) > limit
    return schemas.EntryPage(
        items=items[:limit],
        total=total,
        has_more=has_more,
        has_previous=offset > 0,
    )


def aggregate_stats(db: Session) -> schemas.StoreStats:
    total = db.execute(select(func.count()).select_from(Entry)).scalar_one()
    categories = {
        category or "": count
        for category, count in db.execute(
            select(Entry.category, func.count()).group_by(Entry.category)
        ).all()
    }
    samples = db.execute(select(func.count()).select_from(StatsSample)).scalar_one()
    return schemas.StoreStats(total=total, categories=categories, stats_records=samples)
