"""
Song CRUD, moderation and bulk actions

app/api/v1/songs.py

"""
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from app.api.deps import get_catalog, get_current_admin
from app.core.config import settings
from app.core.errors import RequestError, validation_message
from app.models.base import SongStatus
from app.models.song import (
    BulkUpdateRequest,
    ModerationRequest,
    SongActionRequest,
    SongListResponse,
    SongModerationUpdate,
    SongRecord,
    SongResponse,
    SongUpdate,
)
from app.services.bulk_importer import BulkSongImporter
from app.services.catalog import SongCatalog
from app.services.cover_storage import upload_cover
from app.services.moderation import moderation_patch
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse(model, data: Any):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise RequestError(validation_message(e))


def _require_fields(update) -> Dict[str, Any]:
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        raise RequestError("No valid fields provided for update")
    return fields


# ----------------------------------------------------------------------
# Action handlers
# ----------------------------------------------------------------------

async def _insert(request: SongActionRequest, catalog: SongCatalog):
    if not request.data:
        raise RequestError("Missing data")
    record = _parse(SongRecord, request.data)
    song_id = await catalog.insert_song(record)
    logger.info(f"Song created: {song_id}")
    return {"ok": True, "id": song_id}


async def _update(request: SongActionRequest, catalog: SongCatalog):
    if not request.id or not request.data:
        raise RequestError("Missing id or data")
    fields = _require_fields(_parse(SongUpdate, request.data))
    await catalog.update_song(request.id, fields)
    return {"ok": True}


async def _delete(request: SongActionRequest, catalog: SongCatalog):
    if not request.id:
        raise RequestError("Missing id")
    await catalog.delete_song(request.id)
    logger.info(f"Song deleted: {request.id}")
    return {"ok": True}


async def _moderation(request: SongActionRequest, catalog: SongCatalog):
    if not request.id or not request.data:
        raise RequestError("Missing id or data")
    fields = _require_fields(_parse(SongModerationUpdate, request.data))
    await catalog.update_song(request.id, fields)
    return {"ok": True}


async def _bulk_insert(request: SongActionRequest, catalog: SongCatalog):
    outcome = await BulkSongImporter(catalog).run(request.data)
    return JSONResponse(content=outcome.model_dump(), status_code=outcome.status_code)


async def _bulk_delete(request: SongActionRequest, catalog: SongCatalog):
    if not isinstance(request.data, list) or not request.data:
        raise RequestError("Missing ids array")
    deleted = await catalog.delete_songs(request.data)
    logger.info(f"Bulk delete: {deleted} of {len(request.data)} song(s) removed")
    return {"ok": True, "deleted": deleted}


async def _bulk_update(request: SongActionRequest, catalog: SongCatalog):
    if not isinstance(request.data, dict):
        raise RequestError("Missing ids or updates")
    bulk = _parse(BulkUpdateRequest, request.data)
    fields = _require_fields(bulk.updates)
    updated = await catalog.update_songs(bulk.ids, fields)
    logger.info(f"Bulk update of {len(bulk.ids)} song(s): {sorted(fields)} -> {updated} modified")
    return {"ok": True, "updated": updated}


SONG_ACTIONS = {
    "insert": _insert,
    "update": _update,
    "delete": _delete,
    "moderation": _moderation,
    "bulk_insert": _bulk_insert,
    "bulk_delete": _bulk_delete,
    "bulk_update": _bulk_update,
}


# ----------------------------------------------------------------------
# Routes
# ----------------------------------------------------------------------

@router.post("/")
async def song_action(
    request: SongActionRequest,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """
    Run one song action

    - insert / update / delete / moderation act on a single song
    - bulk_insert imports an array of loosely shaped records (207 on partial success)
    - bulk_delete takes an array of ids
    - bulk_update takes {ids, updates} and patches every listed song
    """
    if not request.action:
        raise RequestError("Missing action")

    handler = SONG_ACTIONS.get(request.action)
    if handler is None:
        raise RequestError("Unknown action")

    return await handler(request, catalog)


@router.get("/", response_model=SongListResponse)
async def list_songs(
    query: Optional[str] = Query(None, description="Search title, artist or genre"),
    status: Optional[SongStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """Songs newest first"""
    songs, total = await catalog.list_songs(query=query, status=status, skip=skip, limit=limit)
    return SongListResponse(songs=[SongResponse(**song) for song in songs], total=total)


@router.post("/cover")
async def upload_song_cover(
    cover: UploadFile = File(...),
    current_user: str = Depends(get_current_admin)
):
    """Upload a cover image and return its public URL"""
    if not cover.filename:
        raise RequestError("No file selected")

    content = await cover.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise RequestError("File too large", status_code=413)

    success, result, object_key = await run_in_threadpool(upload_cover, content, cover.filename)
    if not success:
        raise RequestError(f"Cover upload failed: {result}")

    return {"ok": True, "cover_url": result, "object_key": object_key}


@router.get("/{song_id}", response_model=SongResponse)
async def get_song(
    song_id: str,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    return SongResponse(**await catalog.get_song(song_id))


@router.post("/{song_id}/duplicate", status_code=201)
async def duplicate_song(
    song_id: str,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """Copy a song as a new unfeatured draft with no staged edits"""
    song = await catalog.get_song(song_id)
    copy = SongRecord.model_validate({
        **song,
        "title": f"Copy of {song['title']}",
        "status": SongStatus.DRAFT,
        "featured": False,
        "pending_lyrics": None,
        "pending_chords": None,
        "lyrics_approved": True,
        "chords_approved": True,
    })
    new_id = await catalog.insert_song(copy)
    return {"ok": True, "id": new_id}


@router.post("/{song_id}/moderation", response_model=SongResponse)
async def moderate_song(
    song_id: str,
    request: ModerationRequest,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """Approve or reject the pending lyrics or chords of a song"""
    song = await catalog.get_song(song_id)
    patch = moderation_patch(song, request.field, request.decision)
    await catalog.update_song(song_id, patch)
    logger.info(f"Song {song_id}: {request.decision.value} pending {request.field.value}")
    return SongResponse(**{**song, **patch})
