"""
app/models/imports.py

Bulk import outcome
"""

from typing import List
from pydantic import BaseModel, Field, computed_field


class RecordError(BaseModel):
    """A record that failed validation or persistence"""
    index: int = Field(..., ge=0, description="Position in the submitted array")
    error: str


class RecordSkip(BaseModel):
    """A record rejected as a duplicate of an existing song"""
    index: int = Field(..., ge=0, description="Position in the submitted array")
    reason: str


class ImportOutcome(BaseModel):
    inserted: int = 0
    errors: List[RecordError] = Field(default_factory=list)
    skipped: List[RecordSkip] = Field(default_factory=list)

    @computed_field
    @property
    def ok(self) -> bool:
        return not self.errors and not self.skipped

    @property
    def status_code(self) -> int:
        # 207 Multi-Status for partial success
        return 200 if self.ok else 207

    def add_error(self, index: int, message: str):
        self.errors.append(RecordError(index=index, error=message))

    def add_skip(self, index: int, reason: str):
        self.skipped.append(RecordSkip(index=index, reason=reason))

    def summary(self, preview: int = 3) -> str:
        """One-line operator summary with the first few errors"""
        if self.errors:
            shown = " | ".join(f"#{e.index}: {e.error}" for e in self.errors[:preview])
            return (
                f"Imported {self.inserted} with {len(self.errors)} error(s): {shown} "
                f"and skipped {len(self.skipped)}"
            )
        if self.skipped:
            return f"Imported {self.inserted} song(s), skipped {len(self.skipped)} duplicate(s)"
        return f"Imported {self.inserted} song(s)"
