# harvester/schemas.py
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SortKey(str, Enum):
    NEWEST = "NEWEST"
    OLDEST = "OLDEST"
    NAME_ASC = "NAME_ASC"
    NAME_DESC = "NAME_DESC"
    SIZE_ASC = "SIZE_ASC"
    SIZE_DESC = "SIZE_DESC"
    SEEDS_DESC = "SEEDS_DESC"
    LEECHES_DESC = "LEECHES_DESC"


class EntryBase(BaseModel):
    id: str = Field(..., max_length=255)
    name: str
    category: Optional[str] = None
    size_mb: float = Field(0.0, ge=0)
    added_date: Optional[datetime] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    rating: int = 0
    rating_url: str = ""


class EntryOut(EntryBase):
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class EntryWithStats(EntryOut):
    seeds: int = 0
    leeches: int = 0


class StatsSampleOut(BaseModel):
    id: int
    entry_id: str
    seeds: int
    leeches: int
    recorded_at: datetime
    model_config = ConfigDict(from_attributes=True)


class EntryPage(BaseModel):
    items: List[EntryWithStats]
    total: int
    has_more: bool
    has_previous: bool = False
    next_cursor: Optional[str] = None


class StoreStats(BaseModel):
    total: int
    categories: Dict[str, int]
    stats_records: int


class CrawlReport(BaseModel):
    pages: int
    total_records: int
    persisted: int
    workers: int
    errors: Dict[int, str] = {}
