"""
Bulk song import from CSV and JSON files

app/api/v1/imports.py

"""
from typing import Any, List
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from app.api.deps import get_catalog, get_current_admin
from app.core.config import settings
from app.core.errors import RequestError
from app.services.bulk_importer import BulkSongImporter
from app.services.catalog import SongCatalog
from app.services.csv_tokenizer import read_csv_table
from app.services.song_normalizer import build_category_index, record_from_csv_row
import json
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

SONG_TEMPLATE = {
    "title": "Song Title",
    "artist": "Artist Name",
    "album": "Album",
    "genre": "Pop",
    "language": "English",
    "status": "draft",
    "featured": False,
    "lyrics": "Lyrics text...",
    "chords": "Chords text...",
    "lyrics_chordpro": None,
    "cover_url": None,
    "category_id": None,
    "duration": 210,
    "pending_lyrics": None,
    "pending_chords": None,
    "lyrics_approved": True,
    "chords_approved": True,
}


async def _read_text(upload: UploadFile) -> str:
    if not upload.filename:
        raise RequestError("No file selected")
    content = await upload.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise RequestError("File too large", status_code=413)
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise RequestError("File must be UTF-8 encoded text")


def songs_from_json(payload: Any) -> List[Any]:
    """Accept a bare array or an object with a `songs` array"""
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict) and isinstance(payload.get("songs"), list):
        items = payload["songs"]
    else:
        items = []
    if not items:
        raise RequestError("No songs found in JSON")
    return items


def _outcome_response(outcome) -> JSONResponse:
    content = outcome.model_dump()
    content["message"] = outcome.summary(settings.IMPORT_ERROR_PREVIEW)
    return JSONResponse(content=content, status_code=outcome.status_code)


@router.post("/csv")
async def import_csv(
    file: UploadFile = File(...),
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """
    Import songs from a CSV file

    - Header row required (song_title, artist_name, album, genre, category, cover_image_url, lyrics ...)
    - Categories are matched by name, case-insensitively
    - Rows default to the configured CSV language
    """
    header_map, rows = read_csv_table(await _read_text(file))

    category_index = build_category_index(await catalog.list_categories())
    records = [record_from_csv_row(values, header_map, category_index) for values in rows]

    importer = BulkSongImporter(
        catalog,
        default_language=settings.IMPORT_CSV_DEFAULT_LANGUAGE,
        allow_data_uri=False,
    )
    outcome = await importer.run(records)
    logger.info(f"CSV import {file.filename}: {outcome.summary(settings.IMPORT_ERROR_PREVIEW)}")
    return _outcome_response(outcome)


@router.post("/json")
async def import_json(
    file: UploadFile = File(...),
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """Import songs from a JSON array (or {"songs": [...]})"""
    text = await _read_text(file)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding {file.filename}: {e}")
        raise RequestError("Invalid JSON file")

    outcome = await BulkSongImporter(catalog).run(songs_from_json(payload))
    logger.info(f"JSON import {file.filename}: {outcome.summary(settings.IMPORT_ERROR_PREVIEW)}")
    return _outcome_response(outcome)


@router.get("/template")
async def download_template(current_user: str = Depends(get_current_admin)):
    """JSON template for bulk imports"""
    return JSONResponse(
        content=[SONG_TEMPLATE],
        headers={"Content-Disposition": 'attachment; filename="songs_template.json"'},
    )
