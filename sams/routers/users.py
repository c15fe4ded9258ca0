# sams/routers/users.py
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sams.database import get_db
from sams.core.auth import get_current_director
from sams.models.user import User
from sams.models.assignment import AppraiserAssignment
from sams.models.appraisal import Appraisal
from sams.schemas.user import UserCreate, UserUpdate, UserResponse
from sams.services.exceptions import PersistenceFailed
from sams.utils.password import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _dedupe_roles(primary, extras):
    primary = getattr(primary, "value", primary)
    roles = []
    for role in extras or []:
        value = getattr(role, "value", role)
        if value != primary and value not in roles:
            roles.append(value)
    return roles


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    result = await db.execute(select(User).where(User.email == user_in.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=user_in.email,
        full_name=user_in.full_name,
        hashed_password=hash_password(user_in.password),
        role=user_in.role.value,
        job_category=user_in.job_category.value,
        additional_roles=_dedupe_roles(user_in.role, user_in.additional_roles),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s created with role %s", user.id, user.role)
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_in: UserUpdate,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(404, "User not found")

    if user_in.full_name is not None:
        user.full_name = user_in.full_name
    if user_in.role is not None:
        user.role = user_in.role.value
    if user_in.job_category is not None:
        user.job_category = user_in.job_category.value
    if user_in.additional_roles is not None:
        user.additional_roles = _dedupe_roles(user.role, user_in.additional_roles)
    elif user_in.role is not None:
        user.additional_roles = _dedupe_roles(user.role, user.additional_roles)

    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    director: User = Depends(get_current_director)
):
    if user_id == director.id:
        raise HTTPException(400, "You cannot delete your own account")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(404, "User not found")

    # Rows where the user is the appraiser stay behind on purpose.
    try:
        await db.execute(delete(AppraiserAssignment).where(AppraiserAssignment.appraisee_id == user_id))
        await db.execute(delete(Appraisal).where(Appraisal.appraisee_id == user_id))
        await db.delete(user)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Deleting user %s failed", user_id)
        raise PersistenceFailed(str(e))

    return {"success": True}
