from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Union

import structlog

from recommendation_service.errors import InvalidArgument
from recommendation_service.schemas.recommendation import (
    Priority,
    Recommendation,
    RecommendationSummary,
    RecommendationType,
)
from recommendation_service.services import classifier
from recommendation_service.services.recommendation_store import RecommendationStore
from recommendation_service.utils.time import now_utc, to_utc_aware


logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_type(value: Union[str, RecommendationType]) -> RecommendationType:
    if isinstance(value, RecommendationType):
        return value
    try:
        return RecommendationType(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(t.value for t in RecommendationType)
        raise InvalidArgument(f"Unknown recommendation type {value!r}; expected one of {allowed}") from None


def parse_priority(value: Union[str, Priority]) -> Priority:
    if isinstance(value, Priority):
        return value
    try:
        return Priority(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in Priority)
        raise InvalidArgument(f"Unknown priority {value!r}; expected one of {allowed}") from None


def _non_negative(name: str, value: int) -> int:
    if value < 0:
        raise InvalidArgument(f"{name} must be >= 0, got {value}")
    return value


class RecommendationService:
    """Answers list, summary and point queries over the recommendation store.

    Everything is computed on read. Callers that need one consistent view across
    several calls should fetch once and derive locally; two calls may observe
    different store states.
    """

    def __init__(
        self,
        store: RecommendationStore,
        *,
        clock: Optional[Clock] = None,
        recent_days: int = classifier.RECENT_DAYS,
        monthly_days: int = classifier.MONTHLY_DAYS,
    ) -> None:
        self.store = store
        self._clock = clock or now_utc
        self.recent_days = _non_negative("recent_days", recent_days)
        self.monthly_days = _non_negative("monthly_days", monthly_days)
        self.logger = logger.bind(component="recommendation_service")

    def now(self) -> datetime:
        return to_utc_aware(self._clock())

    def _window_start(self, **window: int) -> datetime:
        """now minus the window, clamped to the earliest representable instant."""
        try:
            return self.now() - timedelta(**window)
        except OverflowError:
            return _EARLIEST

    def get_recommendations(
        self,
        patient_id: str,
        rec_type: Optional[Union[str, RecommendationType]] = None,
    ) -> List[Recommendation]:
        """All recommendations for a patient, newest first, optionally of one type."""
        if rec_type is None:
            recs = self.store.find_by_patient(patient_id)
            self.logger.info("recommendations_fetched", patient_id=patient_id, count=len(recs))
            return recs

        t = parse_type(rec_type)
        recs = self.store.find_by_patient_and_type(patient_id, t)
        self.logger.info("recommendations_fetched", patient_id=patient_id, type=t.value, count=len(recs))
        return recs

    def get_by_priority(self, patient_id: str, priority: Union[str, Priority]) -> List[Recommendation]:
        p = parse_priority(priority)
        recs = self.store.find_by_patient_and_priority(patient_id, p)
        self.logger.info("recommendations_fetched", patient_id=patient_id, priority=p.value, count=len(recs))
        return recs

    def get_recent(self, patient_id: str, days: int = classifier.RECENT_DAYS) -> List[Recommendation]:
        """Records created within the last `days` (exact duration, inclusive)."""
        _non_negative("days", days)
        since = self._window_start(days=days)
        recs = self.store.find_by_patient_since(patient_id, since)
        self.logger.info("recent_recommendations_fetched", patient_id=patient_id, days=days, count=len(recs))
        return recs

    def get_recent_by_type(self, rec_type: Union[str, RecommendationType], hours: int = 24) -> List[Recommendation]:
        """Records of one type across all patients created within the last `hours`."""
        t = parse_type(rec_type)
        _non_negative("hours", hours)
        since = self._window_start(hours=hours)
        recs = self.store.find_by_type_since(t, since)
        self.logger.info("recent_recommendations_by_type_fetched", type=t.value, hours=hours, count=len(recs))
        return recs

    def get_summary(self, patient_id: str) -> RecommendationSummary:
        """Four independent counts over one read of the patient's records.

        A record can land in several buckets at once (recent and critical, say);
        no bucket subtracts from another.
        """
        recs = self.store.find_by_patient(patient_id)
        now = self.now()

        summary = RecommendationSummary(
            recent_count=sum(1 for r in recs if classifier.is_recent(r, now, self.recent_days)),
            monthly_count=sum(1 for r in recs if classifier.is_monthly(r, now, self.monthly_days)),
            high_priority_count=sum(1 for r in recs if classifier.is_high_priority(r)),
            critical_count=sum(1 for r in recs if classifier.is_critical(r)),
        )
        self.logger.info("summary_computed", patient_id=patient_id, total=len(recs), **summary.model_dump())
        return summary

    def get_by_id(self, recommendation_id: str) -> Recommendation:
        """Single record; raises NotFound for an unknown id."""
        rec = self.store.find_by_id(recommendation_id)
        self.logger.info("recommendation_fetched", recommendation_id=recommendation_id, patient_id=rec.patient_id)
        return rec
