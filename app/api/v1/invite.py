"""
Create or invite console users

app/api/v1/invite.py
"""
from fastapi import APIRouter, Depends
from app.api.deps import get_current_admin, get_identity_admin
from app.models.profile import InviteRequest
from app.services.identity_admin import IdentityAdmin

router = APIRouter()


@router.post("/")
async def invite_user(
    request: InviteRequest,
    identity: IdentityAdmin = Depends(get_identity_admin),
    current_user: str = Depends(get_current_admin)
):
    """
    Add a user to the console

    - With a password the account is created confirmed
    - Without one an invitation email with a sign-up link is sent
    """
    email = str(request.email).strip().lower()

    if request.password:
        user_id = await identity.create_user(
            email, request.password, request.role, request.is_admin, request.reason
        )
        return {"ok": True, "created": True, "user_id": user_id}

    user_id, email_sent = await identity.invite_user(email, request.role, request.is_admin, request.reason)
    return {"ok": True, "invited": True, "user_id": user_id, "invite_email_sent": email_sent}
