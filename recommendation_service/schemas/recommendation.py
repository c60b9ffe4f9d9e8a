from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from recommendation_service.utils.time import to_utc_aware


class RecommendationType(str, Enum):
    CLINICAL_NOTE_SUMMARY = "CLINICAL_NOTE_SUMMARY"
    TRIAGE_ASSESSMENT = "TRIAGE_ASSESSMENT"
    CODING_SUGGESTION = "CODING_SUGGESTION"
    HEALTH_RECOMMENDATION = "HEALTH_RECOMMENDATION"
    RISK_ASSESSMENT = "RISK_ASSESSMENT"


class Priority(str, Enum):
    """Severity tier of a recommendation; declaration order is low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python; either is accepted on input
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        from_attributes=True,
    )


class Analysis(_WireModel):
    clinical_summary: Optional[str] = None
    suggested_diagnosis_codes: List[str] = Field(default_factory=list)  # ICD-10
    suggested_procedure_codes: List[str] = Field(default_factory=list)  # CPT
    triage_priority: Optional[str] = None
    recommended_care_level: Optional[str] = None  # primary|urgent|emergency|telehealth
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0, description="0 means not computed")


class Recommendation(_WireModel):
    """A single AI-generated clinical insight tied to one patient.

    Immutable once created. Timestamps are always UTC-aware after validation,
    whatever form the producer or the database handed in.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    patient_id: str = Field(..., min_length=1)
    type: RecommendationType
    priority: Priority
    title: str = ""
    summary: str = ""
    recommendations: List[str] = Field(default_factory=list)
    safety_notes: List[str] = Field(default_factory=list)
    analysis: Optional[Analysis] = None
    source_type: Optional[str] = None  # clinical_note|vital_signs|patient_activity
    source_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _default_updated_at(cls, data: Any) -> Any:
        if isinstance(data, dict):
            has_updated = "updated_at" in data or "updatedAt" in data
            created = data.get("created_at", data.get("createdAt"))
            if not has_updated and created is not None:
                data = {**data, "updated_at": created}
        return data

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _utc(cls, v: Any) -> datetime:
        return to_utc_aware(v)

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> "Recommendation":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self


class RecommendationSummary(_WireModel):
    recent_count: int = Field(default=0, ge=0)
    monthly_count: int = Field(default=0, ge=0)
    high_priority_count: int = Field(default=0, ge=0)
    critical_count: int = Field(default=0, ge=0)
