"""

app/models/_init_.py

"""


from app.models.base import *
from app.models.song import *
from app.models.category import *
from app.models.profile import *
from app.models.imports import *

__all__ = [
    # Base
    "PyObjectId",
    "SongStatus",
    "ModerationField",
    "ModerationDecision",
    "AdminAction",
    "BaseDocument",

    # Song models
    "SongRecord",
    "SongUpdate",
    "SongModerationUpdate",
    "BulkUpdateRequest",
    "ModerationRequest",
    "SongActionRequest",
    "SongResponse",
    "SongListResponse",

    # Category models
    "CategoryCreate",
    "CategoryResponse",

    # Profile models
    "Profile",
    "ProfileResponse",
    "ProfileListResponse",
    "ProfilePatch",
    "InviteRequest",
    "UserActionRequest",
    "AcceptInviteRequest",

    # Import models
    "RecordError",
    "RecordSkip",
    "ImportOutcome",
]
