# sams/models/user.py
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, JSON, func
from sams.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(String, nullable=False)                     # UserRole value
    additional_roles = Column(JSON, nullable=False, default=list)
    job_category = Column(String, nullable=False)             # JobCategory value
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_director(self) -> bool:
        return self.role == "DIRECTOR"
