from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Index, String, Text
from sqlalchemy.orm import declarative_base


Base = declarative_base()


class RecommendationRow(Base):
    __tablename__ = "ai_recommendations"

    id = Column(String, primary_key=True)
    patient_id = Column(String, index=True, nullable=False)
    type = Column(String, nullable=False)
    priority = Column(String, nullable=False)

    title = Column(Text, nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    recommendations = Column(JSON, nullable=False, default=list)
    safety_notes = Column(JSON, nullable=False, default=list)
    analysis = Column(JSON, nullable=True)

    source_type = Column(String, nullable=True)
    source_id = Column(String, nullable=True)

    # naive UTC; the store re-attaches tzinfo on read
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ai_recommendations_patient_created", "patient_id", "created_at"),
        Index("ix_ai_recommendations_type_created", "type", "created_at"),
    )
