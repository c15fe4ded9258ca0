# sams/routers/assignments.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sams.database import get_db
from sams.core.auth import get_current_user, get_current_director
from sams.constants.roles import UserRole, assignable_roles, eligible_appraisers, is_eligible_appraiser
from sams.models.user import User
from sams.schemas.assignment import (
    AssignmentCreate, AssignmentResponse, AssignmentMapResponse,
    EligibleAppraisersResponse, AssignedAppraisee
)
from sams.schemas.user import UserResponse
from sams.services import assignments
from sams.services.exceptions import RecordNotFound, ValidationFailed

router = APIRouter(prefix="/assignments", tags=["assignments"])


async def _get_user(db: AsyncSession, user_id: str, label: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise RecordNotFound(f"{label} not found")
    return user


@router.get("", response_model=AssignmentMapResponse)
async def get_assignments(
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    return AssignmentMapResponse(assignments=await assignments.list_assignments(db))


@router.get("/mine", response_model=List[AssignedAppraisee])
async def get_my_appraisees(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows = await assignments.appraisees_of(db, current_user.id)
    items = []
    for row in rows:
        result = await db.execute(select(User).where(User.id == row.appraisee_id))
        appraisee = result.scalar_one_or_none()
        if appraisee is None:
            continue
        items.append(AssignedAppraisee(
            appraisee=UserResponse.model_validate(appraisee),
            # NULL role means the appraisee's primary role
            assigned_role=row.role or appraisee.role,
        ))
    return items


@router.get("/eligible/{appraisee_id}", response_model=EligibleAppraisersResponse)
async def get_eligible_appraisers(
    appraisee_id: str,
    role: Optional[UserRole] = None,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    appraisee = await _get_user(db, appraisee_id, "Appraisee")
    effective_role = role.value if role else appraisee.role

    result = await db.execute(select(User).where(User.is_active.is_(True)))
    candidates = eligible_appraisers(effective_role, result.scalars().all(), appraisee_id=appraisee.id)
    return EligibleAppraisersResponse(
        appraisee_id=appraisee.id,
        role=effective_role,
        appraisers=[UserResponse.model_validate(u) for u in candidates],
    )


@router.put("/{appraisee_id}", response_model=AssignmentResponse)
async def assign_appraiser(
    appraisee_id: str,
    body: AssignmentCreate,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    appraisee = await _get_user(db, appraisee_id, "Appraisee")
    appraiser = await _get_user(db, body.appraiser_id, "Appraiser")

    if appraisee.is_director:
        raise ValidationFailed("Directors are not appraised")
    role = body.role.value if body.role else None
    if role and role not in assignable_roles(appraisee):
        raise ValidationFailed(f"{appraisee.full_name} does not hold the role {role}")
    if appraiser.id == appraisee.id:
        raise ValidationFailed("A user cannot appraise themselves")
    if not is_eligible_appraiser(role or appraisee.role, appraiser.role):
        raise ValidationFailed(f"{appraiser.role} is not eligible to appraise {role or appraisee.role}")

    return await assignments.assign(db, appraisee.id, appraiser.id, role)


@router.delete("/{appraisee_id}")
async def remove_assignment(
    appraisee_id: str,
    role: Optional[UserRole] = None,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    removed = await assignments.remove(db, appraisee_id, role.value if role else None)
    return {"success": True, "removed": removed}
