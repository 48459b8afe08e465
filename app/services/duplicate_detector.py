"""
Duplicate detection against songs already in the catalog

app/services/duplicate_detector.py

"""
from typing import Iterable, Optional, Set, Tuple

from app.models.song import SongRecord

DUPLICATE_REASON = "Duplicate (title+artist)"


def dedup_key(title: Optional[str], artist: Optional[str]) -> Tuple[str, str]:
    """Case-insensitive (title, artist); a missing artist compares as ''"""
    return ((title or '').lower(), (artist or '').lower())


class DuplicateDetector:
    """
    Checks candidates against a snapshot of existing (title, artist) pairs.

    The snapshot is taken once per batch. Records of the same batch are not
    compared with each other.
    """

    def __init__(self, existing_pairs: Iterable[Tuple[Optional[str], Optional[str]]]):
        self._keys: Set[Tuple[str, str]] = {dedup_key(title, artist) for title, artist in existing_pairs}

    def __len__(self):
        return len(self._keys)

    def is_duplicate(self, record: SongRecord) -> bool:
        return dedup_key(record.title, record.artist) in self._keys
