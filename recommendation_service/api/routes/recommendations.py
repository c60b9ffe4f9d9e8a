from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from recommendation_service.schemas.recommendation import Recommendation, RecommendationSummary
from recommendation_service.services.aggregation import RecommendationService


router = APIRouter(prefix="/api/ai-recommendations", tags=["ai-recommendations"])


def get_service(request: Request) -> RecommendationService:
    return request.app.state.recommendation_service


# Path params stay plain strings so an unknown enum member surfaces as the
# service's InvalidArgument, same as for non-HTTP callers.

@router.get("/patient/{patient_id}", response_model=List[Recommendation])
def recommendations_for_patient(patient_id: str, svc: RecommendationService = Depends(get_service)):
    """All recommendations for a patient, newest first."""
    return svc.get_recommendations(patient_id)


@router.get("/patient/{patient_id}/type/{rec_type}", response_model=List[Recommendation])
def recommendations_for_patient_by_type(
    patient_id: str, rec_type: str, svc: RecommendationService = Depends(get_service)
):
    return svc.get_recommendations(patient_id, rec_type)


@router.get("/patient/{patient_id}/priority/{priority}", response_model=List[Recommendation])
def recommendations_for_patient_by_priority(
    patient_id: str, priority: str, svc: RecommendationService = Depends(get_service)
):
    return svc.get_by_priority(patient_id, priority)


@router.get("/patient/{patient_id}/recent", response_model=List[Recommendation])
def recent_recommendations_for_patient(
    patient_id: str,
    request: Request,
    days: Optional[int] = Query(default=None, description="Window in days; config default when omitted"),
    svc: RecommendationService = Depends(get_service),
):
    if days is None:
        days = request.app.state.config.windows.default_recent_days
    return svc.get_recent(patient_id, days)


@router.get("/patient/{patient_id}/summary", response_model=RecommendationSummary)
def recommendation_summary(patient_id: str, svc: RecommendationService = Depends(get_service)):
    """{recentCount, monthlyCount, highPriorityCount, criticalCount} for one patient."""
    return svc.get_summary(patient_id)


@router.get("/type/{rec_type}/recent", response_model=List[Recommendation])
def recent_recommendations_by_type(
    rec_type: str,
    request: Request,
    hours: Optional[int] = Query(default=None, description="Window in hours; config default when omitted"),
    svc: RecommendationService = Depends(get_service),
):
    if hours is None:
        hours = request.app.state.config.windows.default_type_recent_hours
    return svc.get_recent_by_type(rec_type, hours)


@router.get("/{recommendation_id}", response_model=Recommendation)
def recommendation_by_id(recommendation_id: str, svc: RecommendationService = Depends(get_service)):
    return svc.get_by_id(recommendation_id)
