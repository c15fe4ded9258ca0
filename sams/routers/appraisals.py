# sams/routers/appraisals.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sams.database import get_db
from sams.core.auth import get_current_user, get_current_director
from sams.models.user import User
from sams.schemas.appraisal import (
    AppraisalSave, AppraisalResponse, AppraisalDetailResponse,
    ActionResponse, StatusReset, DeletionRequest
)
from sams.services import appraisals
from sams.services.exceptions import NotAuthorized

router = APIRouter(prefix="/appraisals", tags=["appraisals"])

SUCCESS_MESSAGES = {
    "TARGETS_SET": "Targets set successfully",
    "OBSERVATION_SUBMITTED": "Observations submitted successfully",
    "EVALUATION_SUBMITTED": "Evaluation submitted successfully",
    "TARGETS_SUBMITTED": "Targets submitted successfully",
    "COMPLETED": "Appraisal completed successfully",
}


async def _detail(db: AsyncSession, appraisal) -> AppraisalDetailResponse:
    base = AppraisalResponse.model_validate(appraisal)
    return AppraisalDetailResponse(**base.model_dump(), score=await appraisals.scoresheet(db, appraisal))


@router.post("", response_model=ActionResponse)
async def save_appraisal(
    payload: AppraisalSave,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appraisal = await appraisals.save_appraisal(db, current_user, payload)
    return ActionResponse(
        message=SUCCESS_MESSAGES.get(appraisal.status, "Progress saved successfully"),
        appraisal=AppraisalResponse.model_validate(appraisal),
    )


@router.get("", response_model=List[AppraisalResponse])
async def list_my_appraisals(
    term: Optional[str] = None,
    year: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await appraisals.list_for_appraiser(db, current_user.id, term, year)


@router.get("/deletion-requests", response_model=List[AppraisalResponse])
async def list_deletion_requests(
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    return await appraisals.deletion_requests(db)


@router.get("/{appraisal_id}", response_model=AppraisalDetailResponse)
async def get_appraisal(
    appraisal_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appraisal = await appraisals.get_appraisal(db, appraisal_id)
    if current_user.id not in (appraisal.appraiser_id, appraisal.appraisee_id) and not current_user.is_director:
        raise NotAuthorized("You do not have access to this appraisal")
    return await _detail(db, appraisal)


@router.post("/{appraisal_id}/observations/{slot}/complete", response_model=ActionResponse)
async def complete_observation(
    appraisal_id: str,
    slot: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appraisal = await appraisals.complete_observation(db, current_user, appraisal_id, slot)
    return ActionResponse(message=f"Observation {slot} marked as completed", appraisal=AppraisalResponse.model_validate(appraisal))


@router.post("/{appraisal_id}/reset", response_model=ActionResponse)
async def reset_status(
    appraisal_id: str,
    body: StatusReset,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appraisal = await appraisals.reset_appraisal_status(db, current_user, appraisal_id, body.status)
    return ActionResponse(message=f"Appraisal status updated to {appraisal.status}", appraisal=AppraisalResponse.model_validate(appraisal))


@router.post("/{appraisal_id}/deletion-request", response_model=ActionResponse)
async def request_deletion(
    appraisal_id: str,
    body: DeletionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    appraisal = await appraisals.request_deletion(db, current_user, appraisal_id, body.reason)
    return ActionResponse(message="Deletion request submitted successfully.", appraisal=AppraisalResponse.model_validate(appraisal))


@router.post("/{appraisal_id}/deletion/approve", response_model=ActionResponse)
async def approve_deletion(
    appraisal_id: str,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    await appraisals.approve_deletion(db, appraisal_id)
    return ActionResponse(message="Appraisal deleted successfully")


@router.post("/{appraisal_id}/deletion/reject", response_model=ActionResponse)
async def reject_deletion(
    appraisal_id: str,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    appraisal = await appraisals.reject_deletion(db, appraisal_id)
    return ActionResponse(message="Deletion request rejected", appraisal=AppraisalResponse.model_validate(appraisal))
