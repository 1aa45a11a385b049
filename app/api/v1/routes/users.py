from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import UserCreate, UserOut, NotificationOut
from app.db.session import get_session
from app.db.repositories import create_user, get_user, list_notifications_for_user
from app.core.rate_limit import limiter
from typing import List
from uuid import UUID

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserOut, status_code=201)
@limiter.limit("5/minute")
async def create_user_endpoint(request: Request, payload: UserCreate, session: AsyncSession = Depends(get_session)):
    try:
        return await create_user(session, payload)
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="A user with this email already exists")

@router.get("/{user_id}", response_model=UserOut)
async def get_user_endpoint(user_id: UUID, session: AsyncSession = Depends(get_session)):
    user = await get_user(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.get("/{user_id}/notifications", response_model=List[NotificationOut])
async def list_user_notifications(
    user_id: UUID,
    unread_only: bool = Query(False, description="Only notifications not yet read"),
    session: AsyncSession = Depends(get_session)
):
    """In-app notifications for a user, newest first (e.g. "Spot Available!" after a promotion)."""
    if await get_user(session, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return await list_notifications_for_user(session, user_id, unread_only=unread_only)
