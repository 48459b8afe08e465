"""
Approve / reject staged lyrics and chords

app/services/moderation.py
"""
from typing import Any, Dict, Mapping

from app.core.errors import RequestError
from app.models.base import ModerationDecision, ModerationField


def moderation_patch(song: Mapping[str, Any], field: ModerationField, decision: ModerationDecision) -> Dict[str, Any]:
    """
    Field patch applying a moderation decision to one song.

    Approving copies pending_<field> over <field>; rejecting only clears
    the staged edit. Both record the decision in <field>_approved.
    """
    field = ModerationField(field).value
    pending_key = f"pending_{field}"
    approved_key = f"{field}_approved"

    if ModerationDecision(decision) == ModerationDecision.APPROVE:
        pending = song.get(pending_key)
        if not pending:
            raise RequestError(f"No pending {field} to approve")
        return {field: pending, pending_key: None, approved_key: True}

    return {pending_key: None, approved_key: False}
