"""
app/models/base.py
"""


from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from bson import ObjectId

# Simple PyObjectId for Pydantic v2
# We'll just use string type and handle ObjectId conversion in the database layer
PyObjectId = str

# Enums
class SongStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

class ModerationField(str, Enum):
    LYRICS = "lyrics"
    CHORDS = "chords"

class ModerationDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"

class AdminAction(str, Enum):
    CREATE_USER = "create_user"
    INVITE = "invite"
    RESET_PASSWORD = "reset_password"
    DELETE_USER = "delete_user"

# Base Models
class BaseDocument(BaseModel):
    """Base model for all documents with common fields"""
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_encoders={
            ObjectId: str,
            datetime: lambda v: v.isoformat()
        }
    )

    id: Optional[str] = Field(default=None, alias="_id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
