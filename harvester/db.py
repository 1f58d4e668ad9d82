# harvester/db.py
"""Database engine and session utilities.

Centralized SQLAlchemy engine creation, schema initialization and the session
dependency helper for FastAPI. The store is an embedded SQLite file.
"""
import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./harvester.db")

Base = declarative_base()


def make_engine(url=DATABASE_URL):
    if url.startswith("sqlite"):
        # sessions are opened from crawler worker threads and the API threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(bind):
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = make_engine()
SessionLocal = make_session_factory(engine)


def init_db(bind=None):
    """Create tables, indexes, the full-text shadow table and its triggers."""
    from . import models  # noqa: F401 ensure models are imported so tables are known
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    return SessionLocal
