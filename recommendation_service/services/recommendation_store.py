from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List

import structlog
from sqlalchemy import desc
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Query, Session, sessionmaker

from recommendation_service.db.models import RecommendationRow
from recommendation_service.errors import InvalidArgument, NotFound, Unavailable
from recommendation_service.schemas.recommendation import (
    Priority,
    Recommendation,
    RecommendationType,
)
from recommendation_service.utils.time import to_utc_naive


logger = structlog.get_logger(__name__)


class RecommendationStore:
    """Durable keyed retrieval of Recommendation records.

    Every call opens its own session, so concurrent readers share nothing.
    List queries come back newest first (ties broken by id) and are empty,
    never an error, for unknown patients.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self.logger = logger.bind(component="recommendation_store")

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except IntegrityError:
            db.rollback()
            raise
        except DBAPIError as e:
            db.rollback()
            self.logger.error("store_unavailable", error=str(e))
            raise Unavailable(f"Recommendation store unavailable: {e}") from e
        finally:
            db.close()

    @staticmethod
    def _newest_first(q: Query) -> Query:
        return q.order_by(desc(RecommendationRow.created_at), desc(RecommendationRow.id))

    def _fetch(self, q_builder) -> List[Recommendation]:
        with self._session() as db:
            rows = self._newest_first(q_builder(db.query(RecommendationRow))).all()
            return [_to_record(r) for r in rows]

    def find_by_patient(self, patient_id: str) -> List[Recommendation]:
        return self._fetch(lambda q: q.filter(RecommendationRow.patient_id == patient_id))

    def find_by_patient_and_type(
        self, patient_id: str, rec_type: RecommendationType
    ) -> List[Recommendation]:
        return self._fetch(
            lambda q: q.filter(
                RecommendationRow.patient_id == patient_id,
                RecommendationRow.type == rec_type.value,
            )
        )

    def find_by_patient_and_priority(self, patient_id: str, priority: Priority) -> List[Recommendation]:
        return self._fetch(
            lambda q: q.filter(
                RecommendationRow.patient_id == patient_id,
                RecommendationRow.priority == priority.value,
            )
        )

    def find_by_patient_since(self, patient_id: str, since: datetime) -> List[Recommendation]:
        """Records with created_at >= since (inclusive)."""
        since_naive = to_utc_naive(since)
        return self._fetch(
            lambda q: q.filter(
                RecommendationRow.patient_id == patient_id,
                RecommendationRow.created_at >= since_naive,
            )
        )

    def find_by_type_since(self, rec_type: RecommendationType, since: datetime) -> List[Recommendation]:
        """Records of one type across all patients with created_at >= since."""
        since_naive = to_utc_naive(since)
        return self._fetch(
            lambda q: q.filter(
                RecommendationRow.type == rec_type.value,
                RecommendationRow.created_at >= since_naive,
            )
        )

    def find_by_id(self, recommendation_id: str) -> Recommendation:
        with self._session() as db:
            row = db.get(RecommendationRow, recommendation_id)
            if row is None:
                raise NotFound(recommendation_id)
            return _to_record(row)

    def add(self, rec: Recommendation) -> Recommendation:
        """Append a record. Only the upstream producer writes; there is no update or delete."""
        row = RecommendationRow(
            id=rec.id,
            patient_id=rec.patient_id,
            type=rec.type.value,
            priority=rec.priority.value,
            title=rec.title,
            summary=rec.summary,
            recommendations=list(rec.recommendations),
            safety_notes=list(rec.safety_notes),
            analysis=rec.analysis.model_dump() if rec.analysis is not None else None,
            source_type=rec.source_type,
            source_id=rec.source_id,
            created_at=to_utc_naive(rec.created_at),
            updated_at=to_utc_naive(rec.updated_at),
        )
        try:
            with self._session() as db:
                db.add(row)
                db.commit()
        except IntegrityError as e:
            raise InvalidArgument(f"Recommendation {rec.id!r} already exists") from e

        self.logger.info(
            "recommendation_added",
            recommendation_id=rec.id,
            patient_id=rec.patient_id,
            type=rec.type.value,
            priority=rec.priority.value,
        )
        return rec


def _to_record(row: RecommendationRow) -> Recommendation:
    return Recommendation.model_validate(row)
