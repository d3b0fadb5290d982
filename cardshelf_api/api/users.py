"""User self-service and public profile endpoints."""

import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core import UserManager
from ..middleware.auth import get_current_user
from ..models import (
    HANDLE_PATTERN,
    HandleAvailabilityResponse,
    HandleClaimRequest,
    PublicProfile,
    UserRecord,
)
from ..storage import Database, HandleTaken, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

_handle_re = re.compile(HANDLE_PATTERN)


async def get_user_manager(db: Database = Depends(get_db)) -> UserManager:
    """Dependency to get user manager instance."""
    return UserManager(db)


@router.get("/me", response_model=UserRecord)
async def get_me(user: UserRecord = Depends(get_current_user)) -> UserRecord:
    """The caller's own record, as refreshed by this request's login."""
    return user


@router.post("/handle", response_model=UserRecord)
async def claim_handle(
    request: HandleClaimRequest,
    user: UserRecord = Depends(get_current_user),
    manager: UserManager = Depends(get_user_manager),
) -> UserRecord:
    """Set or change the caller's public handle."""
    try:
        return await manager.claim_handle(user.subject_id, request.handle)
    except HandleTaken as e:
        raise HTTPException(status_code=409, detail="Handle already taken") from e


@router.get("/handle-available", response_model=HandleAvailabilityResponse)
async def check_handle(
    handle: str = Query(..., min_length=1),
    manager: UserManager = Depends(get_user_manager),
) -> HandleAvailabilityResponse:
    """
    Check whether a handle can be claimed.

    Handles that do not match the allowed pattern are reported as unavailable.
    """
    handle = handle.strip()
    if not _handle_re.match(handle):
        return HandleAvailabilityResponse(handle=handle, available=False)

    available = await manager.is_handle_available(handle)
    return HandleAvailabilityResponse(handle=handle, available=available)


@router.get("/by-subject/{subject_id}", response_model=PublicProfile)
async def get_public_profile(
    subject_id: str,
    manager: UserManager = Depends(get_user_manager),
) -> PublicProfile:
    profile = await manager.get_public_profile(subject_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile
