"""
Admin user management

app/api/v1/users.py

"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from app.api.deps import get_current_admin, get_identity_admin
from app.core.errors import RequestError
from app.models.profile import ProfileListResponse, ProfilePatch, ProfileResponse, UserActionRequest
from app.services.identity_admin import IdentityAdmin
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=ProfileListResponse)
async def list_users(
    search: Optional[str] = Query(None, description="Filter by email or role"),
    role: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    identity: IdentityAdmin = Depends(get_identity_admin),
    current_user: str = Depends(get_current_admin)
):
    """Profiles newest first with the exact total for paging"""
    profiles, total = await identity.list_profiles(search=search, role=role, skip=skip, limit=limit)
    return ProfileListResponse(users=[ProfileResponse(**p) for p in profiles], total=total)


@router.patch("/{user_id}", response_model=ProfileResponse)
async def patch_user(
    user_id: str,
    updates: ProfilePatch,
    identity: IdentityAdmin = Depends(get_identity_admin),
    current_user: str = Depends(get_current_admin)
):
    """
    Update role and account flags

    - Only provided fields are changed
    - An admin cannot remove their own admin flag or lock themselves out
    """
    fields = updates.model_dump(exclude_unset=True)
    if not fields:
        raise RequestError("No valid fields provided for update")

    if user_id == current_user and (
        fields.get("is_admin") is False or fields.get("deactivated") or fields.get("banned")
    ):
        raise RequestError("You cannot revoke your own admin access")

    profile = await identity.update_profile(user_id, fields)
    logger.info(f"Profile {user_id} updated by {current_user}: {sorted(fields)}")
    return ProfileResponse(**profile)


@router.post("/")
async def user_action(
    request: UserActionRequest,
    identity: IdentityAdmin = Depends(get_identity_admin),
    current_user: str = Depends(get_current_admin)
):
    """Run reset_password or delete_user on one account"""
    if not request.action:
        raise RequestError("Missing action")

    if request.action == "reset_password":
        if not request.user_id or not request.new_password:
            raise RequestError("user_id and new_password required")
        if len(request.new_password) < 6:
            raise RequestError("Password must be at least 6 characters")
        await identity.reset_password(request.user_id, request.new_password, request.reason)
        logger.info(f"Password reset for {request.user_id} by {current_user}")
        return {"ok": True}

    if request.action == "delete_user":
        if not request.user_id:
            raise RequestError("user_id required")
        if request.user_id == current_user:
            raise RequestError("You cannot delete your own account")
        await identity.delete_user(request.user_id, request.reason)
        logger.info(f"User {request.user_id} deleted by {current_user}")
        return {"ok": True}

    raise RequestError("Unknown action")
