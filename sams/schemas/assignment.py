from pydantic import BaseModel
from typing import Dict, List, Optional
from sams.constants.roles import UserRole
from sams.schemas.user import UserResponse

class AssignmentCreate(BaseModel):
    appraiser_id: str
    role: Optional[UserRole] = None

class AssignmentResponse(BaseModel):
    appraisee_id: str
    appraiser_id: str
    role: Optional[str]

    model_config = {"from_attributes": True}

class AssignmentMapResponse(BaseModel):
    # appraisee_id -> role (or "PRIMARY") -> appraiser_id
    assignments: Dict[str, Dict[str, str]]

class EligibleAppraisersResponse(BaseModel):
    appraisee_id: str
    role: str
    appraisers: List[UserResponse]

class AssignedAppraisee(BaseModel):
    appraisee: UserResponse
    assigned_role: str
