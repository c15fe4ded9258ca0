# sams/routers/reports.py
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sams.database import get_db
from sams.core.auth import get_current_user
from sams.models.user import User
from sams.schemas.appraisal import AppraisalResponse, AppraisalDetailResponse
from sams.services import appraisals
from sams.services.exceptions import NotAuthorized

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/current-term")
async def get_current_term():
    term, year = appraisals.current_term(date.today())
    return {"term": term, "year": year}


@router.get("/team", response_model=List[AppraisalResponse])
async def get_team_performance(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await appraisals.team_performance(db, current_user.id)


@router.get("/appraiser/{appraiser_id}", response_model=List[AppraisalDetailResponse])
async def get_appraiser_scoresheets(
    appraiser_id: str,
    term: Optional[str] = None,
    year: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if current_user.id != appraiser_id and not current_user.is_director:
        raise NotAuthorized("You can only view your own reports")

    rows = await appraisals.list_for_appraiser(db, appraiser_id, term, year)
    sheets = []
    for appraisal in rows:
        base = AppraisalResponse.model_validate(appraisal)
        sheets.append(AppraisalDetailResponse(**base.model_dump(), score=await appraisals.scoresheet(db, appraisal)))
    return sheets
