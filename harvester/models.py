# harvester/models.py
"""SQLAlchemy ORM models for persisted entities.

``Entry`` holds one row per catalog item; ``StatsSample`` is the append-only
seeds/leeches time series. ``entries_fts`` is an FTS5 external-content table
over entry name/category, kept in sync by triggers created alongside the
entries table.
"""
from sqlalchemy import (
    DDL, Column, DateTime, Float, ForeignKey, Index, Integer, Text, UniqueConstraint, event,
)
from .db import Base


class Entry(Base):
    __tablename__ = "entries"
    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    category = Column(Text)
    size_mb = Column(Float, nullable=False, default=0.0)
    added_date = Column(DateTime)
    url = Column(Text)
    image_url = Column(Text)
    rating = Column(Integer, default=0)
    rating_url = Column(Text, default="")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class StatsSample(Base):
    __tablename__ = "stats_samples"
    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(Text, ForeignKey("entries.id"), nullable=False)
    seeds = Column(Integer, nullable=False)
    leeches = Column(Integer, nullable=False)
    recorded_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("entry_id", "recorded_at", sqlite_on_conflict="REPLACE"),
    )

Index("idx_stats_entry_recorded", StatsSample.entry_id, StatsSample.recorded_at.desc())
Index("idx_stats_recorded_at", StatsSample.recorded_at)
Index("idx_entries_category", Entry.category)
Index("idx_entries_updated_at", Entry.updated_at)


FTS_DDL = [
    """CREATE VIRTUAL TABLE IF NOT EXISTS entries_fts USING fts5(
        name, category, content='entries', content_rowid='rowid'
    )""",
    """CREATE TRIGGER IF NOT EXISTS entries_fts_insert AFTER INSERT ON entries BEGIN
        INSERT INTO entries_fts(rowid, name, category) VALUES (new.rowid, new.name, new.category);
    END""",
    """CREATE TRIGGER IF NOT EXISTS entries_fts_update AFTER UPDATE ON entries BEGIN
        INSERT INTO entries_fts(entries_fts, rowid, name, category)
            VALUES ('delete', old.rowid, old.name, old.category);
        INSERT INTO entries_fts(rowid, name, category) VALUES (new.rowid, new.name, new.category);
    END""",
    """CREATE TRIGGER IF NOT EXISTS entries_fts_delete AFTER DELETE ON entries BEGIN
        INSERT INTO entries_fts(entries_fts, rowid, name, category)
            VALUES ('delete', old.rowid, old.name, old.category);
    END""",
]

for _stmt in FTS_DDL:
    event.listen(Entry.__table__, "after_create", DDL(_stmt).execute_if(dialect="sqlite"))
