"""
Appraiser assignment resolver.

One row per (appraisee_id, role). A NULL role is its own key, distinct from
every named role; "PRIMARY" only appears in the read-side mapping.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sams.constants.roles import PRIMARY_ROLE_KEY
from sams.models.assignment import AppraiserAssignment
from sams.services.exceptions import PersistenceFailed

logger = logging.getLogger(__name__)


def _key_filter(appraisee_id: str, role: Optional[str]):
    if role:
        return (AppraiserAssignment.appraisee_id == appraisee_id, AppraiserAssignment.role == role)
    return (AppraiserAssignment.appraisee_id == appraisee_id, AppraiserAssignment.role.is_(None))


async def assign(db: AsyncSession, appraisee_id: str, appraiser_id: str, role: Optional[str] = None) -> AppraiserAssignment:
    """Replace whatever assignment exists for the key. Delete runs before insert, in one transaction."""
    try:
        await db.execute(delete(AppraiserAssignment).where(*_key_filter(appraisee_id, role)))
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Clearing assignment for %s (%s) failed", appraisee_id, role)
        raise PersistenceFailed(f"Failed to clear existing assignment: {e}")

    row = AppraiserAssignment(appraisee_id=appraisee_id, appraiser_id=appraiser_id, role=role or None)
    try:
        db.add(row)
        await db.commit()
        await db.refresh(row)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Creating assignment for %s (%s) failed", appraisee_id, role)
        raise PersistenceFailed(f"Failed to create assignment: {e}")

    logger.info("Assigned appraiser %s to %s (%s)", appraiser_id, appraisee_id, role or PRIMARY_ROLE_KEY)
    return row


async def remove(db: AsyncSession, appraisee_id: str, role: Optional[str] = None) -> int:
    """Delete the key's row; returns the number removed (0 is still success)."""
    try:
        result = await db.execute(delete(AppraiserAssignment).where(*_key_filter(appraisee_id, role)))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Removing assignment for %s (%s) failed", appraisee_id, role)
        raise PersistenceFailed(str(e))
    return result.rowcount or 0


async def list_rows(db: AsyncSession) -> List[AppraiserAssignment]:
    try:
        result = await db.execute(select(AppraiserAssignment).order_by(AppraiserAssignment.id))
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    return list(result.scalars().all())


def to_mapping(rows) -> Dict[str, Dict[str, str]]:
    mapping: Dict[str, Dict[str, str]] = {}
    for row in rows:
        mapping.setdefault(row.appraisee_id, {})[row.role or PRIMARY_ROLE_KEY] = row.appraiser_id
    return mapping


async def list_assignments(db: AsyncSession) -> Dict[str, Dict[str, str]]:
    """appraisee_id -> role (or PRIMARY) -> appraiser_id"""
    return to_mapping(await list_rows(db))


def resolve_appraiser(mapping: Dict[str, Dict[str, str]], appraisee_id: str, role: Optional[str], primary_role: Optional[str] = None) -> Optional[str]:
    """
    Appraiser for an appraisee's role. A NULL-role row only stands in for the
    appraisee's primary role.
    """
    by_role = mapping.get(appraisee_id, {})
    if role and role in by_role:
        return by_role[role]
    if not role or role == primary_role:
        return by_role.get(PRIMARY_ROLE_KEY)
    return None


async def appraisees_of(db: AsyncSession, appraiser_id: str) -> List[AppraiserAssignment]:
    try:
        result = await db.execute(
            select(AppraiserAssignment).where(AppraiserAssignment.appraiser_id == appraiser_id)
        )
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    return list(result.scalars().all())


async def appraisers_of(db: AsyncSession, appraisee_id: str) -> List[AppraiserAssignment]:
    try:
        result = await db.execute(
            select(AppraiserAssignment).where(AppraiserAssignment.appraisee_id == appraisee_id)
        )
    except SQLAlchemyError as e:
        raise PersistenceFailed(str(e))
    return list(result.scalars().all())
