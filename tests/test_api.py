from __future__ import annotations

from datetime import timedelta

from dateutil.parser import isoparse

from conftest import NOW
from recommendation_service.db.session import make_engine, make_session_factory
from recommendation_service.schemas.recommendation import Analysis, Priority, RecommendationType

BASE = "/api/ai-recommendations"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_for_patient_uses_camel_case_and_newest_first(client, add):
    old = add("p1", age=timedelta(days=3))
    new = add(
        "p1",
        age=timedelta(hours=1),
        priority=Priority.HIGH,
        safety_notes=["Allergy: penicillin"],
        analysis=Analysis(confidence_score=0.9, recommended_care_level="urgent"),
    )

    r = client.get(f"{BASE}/patient/p1")

    assert r.status_code == 200
    body = r.json()
    assert [item["id"] for item in body] == [new.id, old.id]
    first = body[0]
    assert first["patientId"] == "p1"
    assert first["priority"] == "high"
    assert first["safetyNotes"] == ["Allergy: penicillin"]
    assert first["analysis"]["confidenceScore"] == 0.9
    assert first["analysis"]["recommendedCareLevel"] == "urgent"
    assert isoparse(first["createdAt"]) == NOW - timedelta(hours=1)


def test_unknown_patient_returns_empty_list(client):
    r = client.get(f"{BASE}/patient/ghost")
    assert r.status_code == 200
    assert r.json() == []


def test_by_type(client, add):
    note = add("p1", rec_type=RecommendationType.CLINICAL_NOTE_SUMMARY)
    add("p1", rec_type=RecommendationType.TRIAGE_ASSESSMENT)

    r = client.get(f"{BASE}/patient/p1/type/CLINICAL_NOTE_SUMMARY")

    assert [item["id"] for item in r.json()] == [note.id]
    assert client.get(f"{BASE}/patient/p1/type/CODING_SUGGESTION").json() == []


def test_by_type_unknown_is_422(client):
    r = client.get(f"{BASE}/patient/p1/type/HOROSCOPE")
    assert r.status_code == 422
    assert "HOROSCOPE" in r.json()["detail"]


def test_by_priority(client, add):
    crit = add("p1", priority=Priority.CRITICAL)
    add("p1", priority=Priority.MEDIUM)

    assert [i["id"] for i in client.get(f"{BASE}/patient/p1/priority/critical").json()] == [crit.id]
    assert client.get(f"{BASE}/patient/p1/priority/extreme").status_code == 422


def test_recent_default_and_explicit_days(client, add):
    fresh = add("p1", age=timedelta(days=2))
    older = add("p1", age=timedelta(days=10))

    assert [i["id"] for i in client.get(f"{BASE}/patient/p1/recent").json()] == [fresh.id]
    got = client.get(f"{BASE}/patient/p1/recent", params={"days": 14}).json()
    assert [i["id"] for i in got] == [fresh.id, older.id]


def test_recent_negative_days_is_422(client):
    assert client.get(f"{BASE}/patient/p1/recent", params={"days": -3}).status_code == 422


def test_summary(client, add):
    add("p1", age=timedelta(days=1), priority=Priority.CRITICAL)
    add("p1", age=timedelta(days=10), priority=Priority.HIGH)
    add("p1", age=timedelta(days=40), priority=Priority.LOW)

    r = client.get(f"{BASE}/patient/p1/summary")

    assert r.status_code == 200
    assert r.json() == {"recentCount": 1, "monthlyCount": 2, "highPriorityCount": 1, "criticalCount": 1}


def test_summary_for_unknown_patient_is_zero(client):
    assert client.get(f"{BASE}/patient/ghost/summary").json() == {
        "recentCount": 0,
        "monthlyCount": 0,
        "highPriorityCount": 0,
        "criticalCount": 0,
    }


def test_recent_by_type(client, add):
    a = add("p1", rec_type=RecommendationType.RISK_ASSESSMENT, age=timedelta(hours=5))
    add("p2", rec_type=RecommendationType.RISK_ASSESSMENT, age=timedelta(hours=30))

    assert [i["id"] for i in client.get(f"{BASE}/type/RISK_ASSESSMENT/recent").json()] == [a.id]
    got = client.get(f"{BASE}/type/RISK_ASSESSMENT/recent", params={"hours": 48}).json()
    assert len(got) == 2


def test_by_id(client, add):
    rec = add("p7", priority=Priority.LOW, recommendations=["Hydrate", "Rest"])

    r = client.get(f"{BASE}/{rec.id}")

    assert r.status_code == 200
    assert r.json()["id"] == rec.id
    assert r.json()["recommendations"] == ["Hydrate", "Rest"]


def test_by_id_missing_is_404(client):
    r = client.get(f"{BASE}/nope")
    assert r.status_code == 404
    assert "nope" in r.json()["detail"]


def test_store_unavailable_is_503():
    from fastapi.testclient import TestClient

    from recommendation_service.api.main import create_app
    from recommendation_service.config import AppConfig
    from recommendation_service.services.aggregation import RecommendationService
    from recommendation_service.services.recommendation_store import RecommendationStore

    # schema never created
    store = RecommendationStore(make_session_factory(make_engine("sqlite://")))
    app = create_app(config=AppConfig(), service=RecommendationService(store, clock=lambda: NOW))

    with TestClient(app) as c:
        r = c.get(f"{BASE}/patient/p1/summary")

    assert r.status_code == 503


def test_recent_with_huge_days_is_not_a_server_error(client, add):
    rec = add("p1", age=timedelta(days=400))

    r = client.get(f"{BASE}/patient/p1/recent", params={"days": 10**6})

    assert r.status_code == 200
    assert [i["id"] for i in r.json()] == [rec.id]


def test_recent_by_type_with_huge_hours_is_not_a_server_error(client, add):
    rec = add("p1", rec_type=RecommendationType.RISK_ASSESSMENT, age=timedelta(days=400))

    r = client.get(f"{BASE}/type/RISK_ASSESSMENT/recent", params={"hours": 10**12})

    assert r.status_code == 200
    assert [i["id"] for i in r.json()] == [rec.id]
