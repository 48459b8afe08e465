"""
Authentication endpoints

app/api/v1/auth.py

"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from app.api.deps import get_identity_admin
from app.core.security import create_access_token
from app.models.profile import AcceptInviteRequest
from app.services.identity_admin import IdentityAdmin
import logging


logger = logging.getLogger(__name__)

router = APIRouter()

class Token(BaseModel):
    access_token: str
    token_type: str
    user_id: str
    email: str


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    identity: IdentityAdmin = Depends(get_identity_admin)
):
    """Exchange email and password for a bearer token"""
    user = await identity.authenticate(form_data.username, form_data.password)
    if not user:
        logger.info(f"Failed login for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": user["_id"]})
    return Token(access_token=access_token, token_type="bearer", user_id=user["_id"], email=user["email"])


@router.post("/accept-invite")
async def accept_invite(
    request: AcceptInviteRequest,
    identity: IdentityAdmin = Depends(get_identity_admin)
):
    """Set the password of an invited account"""
    user_id = await identity.accept_invite(request.token, request.password)
    logger.info(f"Invitation accepted by {user_id}")
    return {"ok": True, "user_id": user_id}
