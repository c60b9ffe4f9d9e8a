# tests/conftest.py
from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from recommendation_service.config import AppConfig
from recommendation_service.db.session import init_db, make_engine, make_session_factory
from recommendation_service.schemas.recommendation import Priority, Recommendation, RecommendationType
from recommendation_service.services.aggregation import RecommendationService
from recommendation_service.services.recommendation_store import RecommendationStore


NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> RecommendationStore:
    return RecommendationStore(make_session_factory(engine))


@pytest.fixture
def service(store) -> RecommendationService:
    return RecommendationService(store, clock=lambda: NOW)


@pytest.fixture
def client(service):
    from recommendation_service.api.main import create_app

    app = create_app(config=AppConfig(), service=service)
    with TestClient(app) as c:
        yield c


_ids = itertools.count(1)


def make_rec(
    patient_id: str = "p1",
    *,
    age: timedelta = timedelta(days=1),
    priority: Priority = Priority.MEDIUM,
    rec_type: RecommendationType = RecommendationType.HEALTH_RECOMMENDATION,
    rec_id: str | None = None,
    **extra,
) -> Recommendation:
    created = NOW - age
    return Recommendation(
        id=rec_id or f"rec-{next(_ids):04d}",
        patient_id=patient_id,
        type=rec_type,
        priority=priority,
        title=extra.pop("title", "AI Assessment"),
        summary=extra.pop("summary", "Routine follow-up suggested."),
        created_at=created,
        updated_at=extra.pop("updated_at", created),
        **extra,
    )


@pytest.fixture
def add(store):
    """Create a record with make_rec and append it to the store."""

    def _add(*args, **kwargs) -> Recommendation:
        return store.add(make_rec(*args, **kwargs))

    return _add
