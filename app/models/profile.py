"""
app/models/profile.py

Admin console user profiles and identity administration requests
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator
from app.models.base import BaseDocument


class Profile(BaseDocument):
    """Profile document kept alongside each identity"""
    email: EmailStr
    role: Optional[str] = None
    is_admin: bool = Field(default=False)
    invited: bool = Field(default=False)
    deactivated: bool = Field(default=False)
    banned: bool = Field(default=False)


class ProfileResponse(BaseModel):
    id: str = Field(alias="_id")
    email: str
    role: Optional[str] = None
    is_admin: bool = False
    invited: bool = False
    deactivated: bool = False
    banned: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)


class ProfileListResponse(BaseModel):
    users: List[ProfileResponse]
    total: int


class ProfilePatch(BaseModel):
    """Admin-editable profile flags - all fields optional"""
    model_config = ConfigDict(extra='forbid')

    role: Optional[str] = Field(None, max_length=50)
    is_admin: Optional[bool] = None
    deactivated: Optional[bool] = None
    banned: Optional[bool] = None

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v is not None:
            cleaned = v.strip().lower()
            return cleaned or None
        return v


class InviteRequest(BaseModel):
    email: EmailStr
    role: Optional[str] = None
    is_admin: bool = False
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    reason: Optional[str] = Field(None, max_length=500)


class UserActionRequest(BaseModel):
    """Body of the identity action endpoint"""
    action: Optional[str] = None
    user_id: Optional[str] = None
    new_password: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=500)


class AcceptInviteRequest(BaseModel):
    token: str
    password: str = Field(..., min_length=6, max_length=128)
