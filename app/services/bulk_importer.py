"""
Bulk song import: normalize, dedupe, batch insert with row-by-row fallback

app/services/bulk_importer.py

"""
from typing import Any, List, Optional, Tuple
import logging

from app.core.errors import PersistenceError, RequestError, ValidationError
from app.models.imports import ImportOutcome
from app.models.song import SongRecord
from app.services.duplicate_detector import DUPLICATE_REASON, DuplicateDetector
from app.services.song_normalizer import normalize_song

logger = logging.getLogger(__name__)

# (position in the submitted array, normalized record)
IndexedRecord = Tuple[int, SongRecord]


class BulkSongImporter:
    """
    Reconciles a batch of raw song records with the catalog.

    Every submitted record ends up in exactly one of inserted, errors or
    skipped. Record-level failures are collected, never raised; only a
    malformed batch raises RequestError.
    """

    def __init__(self, catalog, default_language: Optional[str] = None, allow_data_uri: bool = True):
        self.catalog = catalog
        self.default_language = default_language
        self.allow_data_uri = allow_data_uri

    async def run(self, records: Any) -> ImportOutcome:
        if not isinstance(records, list) or not records:
            raise RequestError("Missing data array")

        outcome = ImportOutcome()

        normalized = self._normalize(records, outcome)
        queued = await self._classify(normalized, outcome)
        if queued:
            await self._insert(queued, outcome)

        logger.info(
            f"Bulk import of {len(records)} record(s): inserted={outcome.inserted} "
            f"errors={len(outcome.errors)} skipped={len(outcome.skipped)}"
        )
        return outcome

    def _normalize(self, records: List[Any], outcome: ImportOutcome) -> List[IndexedRecord]:
        normalized: List[IndexedRecord] = []
        for index, raw in enumerate(records):
            try:
                record = normalize_song(
                    raw,
                    index,
                    default_language=self.default_language,
                    allow_data_uri=self.allow_data_uri,
                )
            except ValidationError as e:
                outcome.add_error(index, e.message)
                continue
            normalized.append((index, record))
        return normalized

    async def _classify(self, normalized: List[IndexedRecord], outcome: ImportOutcome) -> List[IndexedRecord]:
        titles = list(dict.fromkeys(record.title for _, record in normalized))
        detector = DuplicateDetector(await self.catalog.find_existing_pairs(titles))

        queued: List[IndexedRecord] = []
        for index, record in normalized:
            if detector.is_duplicate(record):
                outcome.add_skip(index, DUPLICATE_REASON)
            else:
                queued.append((index, record))
        return queued

    async def _insert(self, queued: List[IndexedRecord], outcome: ImportOutcome):
        try:
            await self.catalog.insert_songs([record for _, record in queued])
            outcome.inserted = len(queued)
            return
        except PersistenceError as e:
            logger.warning(f"Batch insert of {len(queued)} song(s) failed, retrying one by one: {e.message}")

        for index, record in queued:
            try:
                await self.catalog.insert_song(record)
            except PersistenceError as e:
                logger.error(f"Insert failed for record #{index} ({record.title!r}): {e.message}")
                outcome.add_error(index, e.message)
                continue
            outcome.inserted += 1
