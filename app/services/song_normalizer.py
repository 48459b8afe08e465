"""
Song record normalization for bulk imports

app/services/song_normalizer.py

Maps loosely structured input (JSON objects or CSV rows looked up through
their header) onto the canonical SongRecord shape.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence
import math
import re

from pydantic import HttpUrl, TypeAdapter, ValidationError as PydanticValidationError

from app.core.errors import ValidationError, validation_message
from app.models.base import SongStatus
from app.models.song import SongRecord

# Accepted spellings, first non-empty match wins
TITLE_KEYS = ("title", "Title", "song_title")
ARTIST_KEYS = ("artist", "singer", "artist_name")
ALBUM_KEYS = ("album", "albub", "filim", "film")
GENRE_KEYS = ("genre", "gener")
COVER_URL_KEYS = ("cover_url", "coverUrl", "cover", "cover image", "cover_image_url")

# CSV header -> canonical field
CSV_HEADER_FIELDS = {
    "song_title": "title",
    "title": "title",
    "artist_name": "artist",
    "artist": "artist",
    "album": "album",
    "genre": "genre",
    "language": "language",
    "status": "status",
    "lyrics": "lyrics",
    "chords": "chords",
    "duration": "duration",
    "cover_image_url": "cover_url",
    "cover_url": "cover_url",
}
CSV_CATEGORY_HEADER = "category"

TRUE_STRINGS = {"true", "1", "yes", "y", "on"}
FALSE_STRINGS = {"false", "0", "no", "n", "off", ""}

DATA_IMAGE_RE = re.compile(r'^data:image/', re.IGNORECASE)
_http_url = TypeAdapter(HttpUrl)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _body(value: Any) -> Optional[str]:
    # Free text keeps its own whitespace
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _first(raw: Mapping, keys: Sequence[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value).strip() != '':
            return value
    return None


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        return default
    return bool(value)


def coerce_duration(value: Any) -> Optional[float]:
    """Seconds as a non-negative number, or None when not numeric"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def clean_cover_url(value: Any, allow_data_uri: bool = True) -> Optional[str]:
    """Keep absolute http(s) URLs (and inline image data when allowed), drop anything else"""
    text = _text(value)
    if text is None:
        return None
    if DATA_IMAGE_RE.match(text):
        return text if allow_data_uri else None
    try:
        _http_url.validate_python(text)
    except PydanticValidationError:
        return None
    return text


def _status(value: Any, index: Optional[int]) -> SongStatus:
    text = _text(value)
    if text is None:
        return SongStatus.DRAFT
    try:
        return SongStatus(text.lower())
    except ValueError:
        raise ValidationError(f"Invalid status: {text}", index)


def _artist(raw: Mapping) -> Optional[str]:
    artist = _text(_first(raw, ARTIST_KEYS))
    if artist is None and isinstance(raw.get("artists"), list):
        names = [str(name).strip() for name in raw["artists"] if name and str(name).strip()]
        artist = ", ".join(names) or None
    return artist


def normalize_song(
    raw: Any,
    index: Optional[int] = None,
    *,
    default_language: Optional[str] = None,
    allow_data_uri: bool = True,
) -> SongRecord:
    """
    Build a SongRecord from one raw input record.

    Raises ValidationError tagged with `index` when the title is missing,
    the status is unknown, or the record is not an object. Unusable
    optional values (bad URL, non-numeric duration) become None instead.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Invalid record", index)

    title = _text(_first(raw, TITLE_KEYS))
    if not title:
        raise ValidationError("Missing required field: title", index)

    try:
        return SongRecord(
            title=title,
            artist=_artist(raw),
            album=_text(_first(raw, ALBUM_KEYS)),
            genre=_text(_first(raw, GENRE_KEYS)),
            language=_text(raw.get("language")) or default_language,
            status=_status(raw.get("status"), index),
            featured=_flag(raw.get("featured"), False),
            lyrics=_body(raw.get("lyrics")),
            chords=_body(raw.get("chords")),
            lyrics_chordpro=_body(raw.get("lyrics_chordpro")),
            cover_url=clean_cover_url(_first(raw, COVER_URL_KEYS), allow_data_uri),
            category_id=_text(raw.get("category_id")),
            duration=coerce_duration(raw.get("duration")),
            pending_lyrics=_body(raw.get("pending_lyrics")),
            pending_chords=_body(raw.get("pending_chords")),
            lyrics_approved=_flag(raw.get("lyrics_approved"), True),
            chords_approved=_flag(raw.get("chords_approved"), True),
        )
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e), index)


def build_category_index(categories: Iterable[Mapping]) -> Dict[str, str]:
    """Lower-cased category name -> category id"""
    index: Dict[str, str] = {}
    for category in categories:
        name = _text(category.get("name"))
        category_id = category.get("_id", category.get("id"))
        if name and category_id is not None:
            index.setdefault(name.lower(), str(category_id))
    return index


def record_from_csv_row(
    values: List[str],
    header_map: Mapping[str, int],
    category_index: Mapping[str, str],
) -> Dict[str, Any]:
    """Look a CSV row up through its header into a raw record"""

    def get(header: str) -> str:
        column = header_map.get(header)
        if column is None or column >= len(values):
            return ''
        return values[column]

    raw: Dict[str, Any] = {"title": ''}
    for header, field in CSV_HEADER_FIELDS.items():
        value = get(header)
        if value and not raw.get(field):
            raw[field] = value

    category_name = get(CSV_CATEGORY_HEADER).strip()
    raw["category_id"] = category_index.get(category_name.lower()) if category_name else None
    return raw
