# sams/models/appraisal.py
import uuid
from sqlalchemy import Column, String, Text, Float, Boolean, DateTime, JSON, ForeignKey, func
from sams.database import Base

class Appraisal(Base):
    __tablename__ = "appraisals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    appraiser_id = Column(String(36), nullable=False, index=True)
    appraisee_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=True)
    status = Column(String, nullable=False, default="DRAFT")
    appraisal_data = Column(JSON, nullable=False, default=dict)
    overall_score = Column(Float, nullable=False, default=0.0)

    deletion_requested = Column(Boolean, nullable=False, default=False)
    deletion_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
