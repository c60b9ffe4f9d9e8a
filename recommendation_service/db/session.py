from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recommendation_service.db.models import Base


def _is_memory(url) -> bool:
    return not url.database or url.database == ":memory:"


def make_engine(db_url: str) -> Engine:
    url = make_url(db_url)
    kwargs = {}
    if url.get_backend_name() == "sqlite":
        # FastAPI serves sync routes from a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory(url):
            # one shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(db_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create the schema, and the parent directory of a SQLite file if needed."""
    url = engine.url
    if url.get_backend_name() == "sqlite" and not _is_memory(url):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
