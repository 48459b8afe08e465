"""
Catalog data access for songs and categories

app/services/catalog.py

"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
from datetime import datetime
import logging
import re

from bson import ObjectId
from bson.errors import BSONError
from pymongo.collation import Collation
from pymongo.errors import BulkWriteError, PyMongoError

from app.core.errors import NotFoundError, PersistenceError, RequestError
from app.models.base import SongStatus
from app.models.song import SongRecord

logger = logging.getLogger(__name__)

# Case-insensitive comparison for title lookups
CASE_INSENSITIVE = Collation(locale="en", strength=2)


def to_object_id(value: Any, label: str = "song") -> ObjectId:
    """Parse an id from the request or raise a 400"""
    if not isinstance(value, (str, ObjectId)) or not ObjectId.is_valid(value):
        raise RequestError(f"Invalid {label} ID format")
    return ObjectId(value)


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc["_id"] = str(doc["_id"])
    return doc


def _bulk_write_message(error: BulkWriteError) -> str:
    write_errors = error.details.get("writeErrors") or []
    if write_errors:
        return write_errors[0].get("errmsg", str(error))
    return str(error)


def _encoding_message(error: Exception) -> str:
    if isinstance(error, UnicodeEncodeError):
        return "Record contains text that cannot be stored (invalid unicode)"
    return f"Record cannot be stored: {error}"


class SongCatalog:
    """Query interface over the songs and categories collections"""

    def __init__(self, db):
        self.db = db

    # ------------------------------------------------------------------
    # Songs
    # ------------------------------------------------------------------

    async def list_songs(
        self,
        query: Optional[str] = None,
        status: Optional[SongStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Newest first, searching title/artist/genre"""
        filters: Dict[str, Any] = {}
        if query and query.strip():
            pattern = re.compile(re.escape(query.strip()), re.IGNORECASE)
            filters["$or"] = [{"title": pattern}, {"artist": pattern}, {"genre": pattern}]
        if status:
            value = SongStatus(status).value
            # Songs without a status count as drafts
            filters["status"] = {"$in": [value, None]} if value == SongStatus.DRAFT.value else value

        total = await self.db.songs.count_documents(filters)
        cursor = self.db.songs.find(filters).sort("created_at", -1).skip(skip).limit(limit)
        songs = [serialize(doc) async for doc in cursor]
        return songs, total

    async def get_song(self, song_id: str) -> Dict[str, Any]:
        doc = await self.db.songs.find_one({"_id": to_object_id(song_id)})
        if not doc:
            raise NotFoundError("Song not found")
        return serialize(doc)

    async def find_existing_pairs(self, titles: Sequence[str]) -> List[Tuple[str, Optional[str]]]:
        """(title, artist) of stored songs whose title matches one of `titles`"""
        if not titles:
            return []
        cursor = self.db.songs.find(
            {"title": {"$in": list(titles)}},
            {"_id": 0, "title": 1, "artist": 1},
            collation=CASE_INSENSITIVE,
        )
        return [(doc.get("title"), doc.get("artist")) async for doc in cursor]

    def _new_document(self, record: SongRecord) -> Dict[str, Any]:
        now = datetime.utcnow()
        return {
            "_id": ObjectId(),
            **record.model_dump(),
            "created_at": now,
            "updated_at": now,
        }

    async def insert_songs(self, records: Sequence[SongRecord]) -> List[str]:
        """
        Insert all records or none.

        A partially applied ordered insert_many is rolled back before the
        failure is reported.
        """
        docs = [self._new_document(record) for record in records]
        try:
            result = await self.db.songs.insert_many(docs, ordered=True)
        except BulkWriteError as e:
            await self._discard([doc["_id"] for doc in docs[:e.details.get("nInserted", 0)]])
            raise PersistenceError(_bulk_write_message(e))
        except PyMongoError as e:
            await self._discard([doc["_id"] for doc in docs])
            raise PersistenceError(str(e))
        except (BSONError, UnicodeEncodeError) as e:
            await self._discard([doc["_id"] for doc in docs])
            raise PersistenceError(_encoding_message(e))
        return [str(inserted_id) for inserted_id in result.inserted_ids]

    async def _discard(self, ids: List[ObjectId]):
        if not ids:
            return
        try:
            await self.db.songs.delete_many({"_id": {"$in": ids}})
            logger.warning(f"Rolled back {len(ids)} song(s) from a failed batch insert")
        except PyMongoError as e:
            logger.error(f"Could not roll back partial batch insert of {len(ids)} song(s): {e}")

    async def insert_song(self, record: SongRecord) -> str:
        try:
            result = await self.db.songs.insert_one(self._new_document(record))
        except PyMongoError as e:
            raise PersistenceError(str(e))
        except (BSONError, UnicodeEncodeError) as e:
            raise PersistenceError(_encoding_message(e))
        return str(result.inserted_id)

    async def update_song(self, song_id: str, fields: Dict[str, Any]):
        song_oid = to_object_id(song_id)
        try:
            result = await self.db.songs.update_one(
                {"_id": song_oid},
                {"$set": {**fields, "updated_at": datetime.utcnow()}},
            )
        except PyMongoError as e:
            raise PersistenceError(str(e))
        if result.matched_count == 0:
            raise NotFoundError("Song not found")

    async def update_songs(self, song_ids: Sequence[str], fields: Dict[str, Any]) -> int:
        oids = [to_object_id(song_id) for song_id in song_ids]
        try:
            result = await self.db.songs.update_many(
                {"_id": {"$in": oids}},
                {"$set": {**fields, "updated_at": datetime.utcnow()}},
            )
        except PyMongoError as e:
            raise PersistenceError(str(e))
        return result.modified_count

    async def delete_song(self, song_id: str):
        song_oid = to_object_id(song_id)
        try:
            result = await self.db.songs.delete_one({"_id": song_oid})
        except PyMongoError as e:
            raise PersistenceError(str(e))
        if result.deleted_count == 0:
            raise NotFoundError("Song not found")

    async def delete_songs(self, song_ids: Sequence[str]) -> int:
        oids = [to_object_id(song_id) for song_id in song_ids]
        try:
            result = await self.db.songs.delete_many({"_id": {"$in": oids}})
        except PyMongoError as e:
            raise PersistenceError(str(e))
        return result.deleted_count

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> List[Dict[str, Any]]:
        cursor = self.db.categories.find({}, {"name": 1}).sort("name", 1)
        return [serialize(doc) async for doc in cursor]

    async def create_category(self, name: str) -> Dict[str, Any]:
        now = datetime.utcnow()
        doc = {"name": name, "created_at": now, "updated_at": now}
        try:
            result = await self.db.categories.insert_one(doc)
        except PyMongoError as e:
            raise PersistenceError(str(e))
        return {"_id": str(result.inserted_id), "name": name}

    async def rename_category(self, category_id: str, name: str) -> Dict[str, Any]:
        category_oid = to_object_id(category_id, "category")
        try:
            result = await self.db.categories.update_one(
                {"_id": category_oid},
                {"$set": {"name": name, "updated_at": datetime.utcnow()}},
            )
        except PyMongoError as e:
            raise PersistenceError(str(e))
        if result.matched_count == 0:
            raise NotFoundError("Category not found")
        return {"_id": category_id, "name": name}

    async def delete_category(self, category_id: str):
        category_oid = to_object_id(category_id, "category")
        try:
            result = await self.db.categories.delete_one({"_id": category_oid})
        except PyMongoError as e:
            raise PersistenceError(str(e))
        if result.deleted_count == 0:
            raise NotFoundError("Category not found")
