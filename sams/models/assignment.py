# sams/models/assignment.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sams.database import Base

class AppraiserAssignment(Base):
    __tablename__ = "appraiser_assignments"

    id = Column(Integer, primary_key=True, index=True)
    appraisee_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # No FK: the appraiser's account may be deleted while the row is kept.
    appraiser_id = Column(String(36), nullable=False, index=True)
    role = Column(String, nullable=True)  # NULL = primary assignment
    created_at = Column(DateTime(timezone=True), server_default=func.now())
