"""
Appraisal persistence around the workflow and scoring engines.

Order of checks on every write: authorization, then validation, then the
database call. Nothing is retried; callers resubmit.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sams.models.appraisal import Appraisal
from sams.models.user import User
from sams.schemas.appraisal import AppraisalData, AppraisalSave, ScoreBreakdown
from sams.services import assignments, workflow
from sams.services.exceptions import NotAuthorized, PersistenceFailed, RecordNotFound, ValidationFailed
from sams.services.scoring import score_appraisal

logger = logging.getLogger(__name__)


def load_document(appraisal: Appraisal) -> AppraisalData:
    """Validate the stored JSON document; defaults fill any missing block."""
    try:
        return AppraisalData.model_validate(appraisal.appraisal_data or {})
    except ValidationError as e:
        raise ValidationFailed(f"Stored appraisal document is invalid: {e.error_count()} error(s)")


async def effective_role(db: AsyncSession, role: Optional[str], appraisee_id: str) -> str:
    """The role an appraisal is judged under. A NULL role means the appraisee's primary role."""
    if role:
        return role
    try:
        result = await db.execute(select(User.role).where(User.id == appraisee_id))
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    primary = result.scalar_one_or_none()
    if primary is None:
        raise RecordNotFound("Appraisee not found")
    return primary


async def scoresheet(db: AsyncSession, appraisal: Appraisal) -> ScoreBreakdown:
    role = await effective_role(db, appraisal.role, appraisal.appraisee_id)
    return score_appraisal(load_document(appraisal), role)


def current_term(today: Optional[date] = None) -> Tuple[str, str]:
    """Academic term for a date. December already belongs to next year's Term 1."""
    today = today or date.today()
    if today.month == 12:
        return "Term 1", str(today.year + 1)
    if today.month <= 4:
        return "Term 1", str(today.year)
    if today.month <= 8:
        return "Term 2", str(today.year)
    return "Term 3", str(today.year)


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("%s failed", action)
        raise PersistenceFailed(str(e))


async def get_appraisal(db: AsyncSession, appraisal_id: str) -> Appraisal:
    try:
        result = await db.execute(select(Appraisal).where(Appraisal.id == appraisal_id))
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    appraisal = result.scalar_one_or_none()
    if appraisal is None:
        raise RecordNotFound("Appraisal not found")
    return appraisal


async def find_for_period(
    db: AsyncSession, appraiser_id: str, appraisee_id: str, role: Optional[str], term: str, year: str
) -> Optional[Appraisal]:
    query = select(Appraisal).where(
        Appraisal.appraiser_id == appraiser_id,
        Appraisal.appraisee_id == appraisee_id,
    )
    if role:
        query = query.where(Appraisal.role == role)
    else:
        query = query.where(Appraisal.role.is_(None))
    try:
        result = await db.execute(query.order_by(Appraisal.created_at))
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))

    # term/year live inside the JSON document
    for appraisal in result.scalars():
        data = appraisal.appraisal_data or {}
        if data.get("term") == term and data.get("year") == year:
            return appraisal
    return None


async def save_appraisal(db: AsyncSession, caller: User, payload: AppraisalSave) -> Appraisal:
    """Create or update an appraisal, advancing its status through the workflow."""
    if payload.appraiser_id != caller.id:
        raise NotAuthorized("Unauthorized operation")

    role = payload.role or None
    data = payload.appraisal_data

    if payload.appraisal_id:
        existing = await get_appraisal(db, payload.appraisal_id)
    else:
        existing = await find_for_period(
            db, payload.appraiser_id, payload.appraisee_id, role, data.term, data.year
        )

    if existing is not None and existing.appraiser_id != caller.id:
        raise NotAuthorized("Unauthorized operation")

    # role stays NULL in the row; gates and scoring use the resolved one
    judged_as = await effective_role(db, role, payload.appraisee_id)
    current = existing.status if existing is not None else None
    status = workflow.check_transition(current, payload.status, data, judged_as)
    score = score_appraisal(data, judged_as).total

    if existing is None:
        appraisal = Appraisal(
            appraiser_id=payload.appraiser_id,
            appraisee_id=payload.appraisee_id,
            role=role,
            status=status.value,
            appraisal_data=data.to_document(),
            overall_score=score,
        )
        db.add(appraisal)
    else:
        appraisal = existing
        appraisal.status = status.value
        appraisal.appraisal_data = data.to_document()
        appraisal.overall_score = score
        appraisal.role = role
        appraisal.updated_at = datetime.now(timezone.utc)

    await _commit(db, "Saving appraisal")
    await db.refresh(appraisal)
    logger.info("Saved appraisal %s (%s, score %.1f)", appraisal.id, appraisal.status, score)
    return appraisal


async def complete_observation(db: AsyncSession, caller: User, appraisal_id: str, slot: int) -> Appraisal:
    appraisal = await get_appraisal(db, appraisal_id)
    if appraisal.appraiser_id != caller.id:
        raise NotAuthorized("Unauthorized operation")

    role = await effective_role(db, appraisal.role, appraisal.appraisee_id)
    data = workflow.mark_observation_complete(load_document(appraisal), slot, role)

    # overall status is left untouched
    appraisal.appraisal_data = data.to_document()
    appraisal.overall_score = score_appraisal(data, role).total
    appraisal.updated_at = datetime.now(timezone.utc)

    await _commit(db, "Completing observation")
    await db.refresh(appraisal)
    return appraisal


async def reset_appraisal_status(db: AsyncSession, caller: User, appraisal_id: str, new_status: str) -> Appraisal:
    # role comes from the stored row, not from the request
    try:
        result = await db.execute(select(User.role).where(User.id == caller.id))
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    status = workflow.authorize_reset(result.scalar_one_or_none(), new_status)

    appraisal = await get_appraisal(db, appraisal_id)
    appraisal.status = status.value
    appraisal.updated_at = datetime.now(timezone.utc)

    await _commit(db, "Resetting appraisal status")
    await db.refresh(appraisal)
    logger.info("Director %s reset appraisal %s to %s", caller.id, appraisal_id, status.value)
    return appraisal


async def request_deletion(db: AsyncSession, caller: User, appraisal_id: str, reason: str) -> Appraisal:
    appraisal = await get_appraisal(db, appraisal_id)
    if appraisal.appraiser_id != caller.id:
        raise NotAuthorized("Only the appraiser can request deletion of this appraisal")

    appraisal.deletion_requested = True
    appraisal.deletion_reason = reason
    await _commit(db, "Requesting deletion")
    await db.refresh(appraisal)
    return appraisal


async def approve_deletion(db: AsyncSession, appraisal_id: str) -> None:
    appraisal = await get_appraisal(db, appraisal_id)
    if not appraisal.deletion_requested:
        raise ValidationFailed("No deletion request is pending for this appraisal")
    await db.delete(appraisal)
    await _commit(db, "Approving deletion")
    logger.info("Appraisal %s deleted on request", appraisal_id)


async def reject_deletion(db: AsyncSession, appraisal_id: str) -> Appraisal:
    appraisal = await get_appraisal(db, appraisal_id)
    appraisal.deletion_requested = False
    appraisal.deletion_reason = None
    await _commit(db, "Rejecting deletion")
    await db.refresh(appraisal)
    return appraisal


async def _fetch(db: AsyncSession, query) -> List[Appraisal]:
    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    return list(result.scalars().all())


def _in_period(appraisal: Appraisal, term: Optional[str], year: Optional[str]) -> bool:
    data = appraisal.appraisal_data or {}
    if term and data.get("term") != term:
        return False
    if year and data.get("year") != year:
        return False
    return True


async def list_for_appraiser(
    db: AsyncSession, appraiser_id: str, term: Optional[str] = None, year: Optional[str] = None
) -> List[Appraisal]:
    rows = await _fetch(
        db,
        select(Appraisal)
        .where(Appraisal.appraiser_id == appraiser_id)
        .order_by(Appraisal.updated_at.desc()),
    )
    return [a for a in rows if _in_period(a, term, year)]


async def deletion_requests(db: AsyncSession) -> List[Appraisal]:
    return await _fetch(
        db,
        select(Appraisal)
        .where(Appraisal.deletion_requested.is_(True))
        .order_by(Appraisal.updated_at.desc()),
    )


async def team_performance(db: AsyncSession, user_id: str) -> List[Appraisal]:
    """Appraisals written by the people this user appraises."""
    direct = await assignments.appraisees_of(db, user_id)
    appraiser_ids = sorted({row.appraisee_id for row in direct})
    if not appraiser_ids:
        return []
    return await _fetch(
        db,
        select(Appraisal)
        .where(Appraisal.appraiser_id.in_(appraiser_ids))
        .order_by(Appraisal.updated_at.desc()),
    )
