"""
app/models/song.py

"""


from typing import Optional, List, Any
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator
from app.models.base import SongStatus, ModerationField, ModerationDecision, PyObjectId


class SongRecord(BaseModel):
    """Canonical song shape written to the catalog"""
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=300)
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    language: Optional[str] = None
    status: SongStatus = SongStatus.DRAFT
    featured: bool = False

    # Content
    lyrics: Optional[str] = None
    chords: Optional[str] = None
    lyrics_chordpro: Optional[str] = None

    cover_url: Optional[str] = None
    category_id: Optional[PyObjectId] = None
    duration: Optional[float] = Field(None, ge=0)

    # Moderation
    pending_lyrics: Optional[str] = None
    pending_chords: Optional[str] = None
    lyrics_approved: bool = True
    chords_approved: bool = True

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Missing required field: title")
        return cleaned


class SongUpdate(BaseModel):
    """Partial song update - only provided fields are written"""
    model_config = ConfigDict(extra='forbid', use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1, max_length=300)
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    language: Optional[str] = None
    status: Optional[SongStatus] = None
    featured: Optional[bool] = None
    lyrics: Optional[str] = None
    chords: Optional[str] = None
    lyrics_chordpro: Optional[str] = None
    cover_url: Optional[str] = None
    category_id: Optional[PyObjectId] = None
    duration: Optional[float] = Field(None, ge=0)
    pending_lyrics: Optional[str] = None
    pending_chords: Optional[str] = None
    lyrics_approved: Optional[bool] = None
    chords_approved: Optional[bool] = None


class SongModerationUpdate(BaseModel):
    """Field patch limited to staged content and approval flags"""
    model_config = ConfigDict(extra='forbid')

    lyrics: Optional[str] = None
    chords: Optional[str] = None
    pending_lyrics: Optional[str] = None
    pending_chords: Optional[str] = None
    lyrics_approved: Optional[bool] = None
    chords_approved: Optional[bool] = None


class BulkUpdateRequest(BaseModel):
    ids: List[PyObjectId] = Field(..., min_length=1)
    updates: SongUpdate


class ModerationRequest(BaseModel):
    field: ModerationField
    decision: ModerationDecision


class SongActionRequest(BaseModel):
    """Body of the song action endpoint"""
    action: Optional[str] = None
    id: Optional[PyObjectId] = None
    data: Any = None


class SongResponse(SongRecord):
    id: str = Field(alias="_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class SongListResponse(BaseModel):
    songs: List[SongResponse]
    total: int
