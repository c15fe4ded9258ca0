from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime
from sams.constants.roles import UserRole, JobCategory

class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole
    job_category: JobCategory
    additional_roles: List[UserRole] = []

class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    role: Optional[UserRole] = None
    job_category: Optional[JobCategory] = None
    additional_roles: Optional[List[UserRole]] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class UserResponse(BaseModel):
    id: str
    email: EmailStr
    full_name: str
    role: str
    additional_roles: List[str] = []
    job_category: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("additional_roles", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return v or []

class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse
