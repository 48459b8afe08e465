"""Shared fixtures.

Settings are read from the environment when `app.core.config` is first
imported, so the required keys are set here before any app module loads.
API tests run against in-memory stand-ins for the catalog and identity
collaborators through FastAPI dependency overrides.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "lyrics_admin_test")

from bson import ObjectId  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_catalog, get_current_admin, get_identity_admin  # noqa: E402
from app.core.errors import NotFoundError, PersistenceError, RequestError  # noqa: E402
from app.main import app  # noqa: E402
from app.models.base import SongStatus  # noqa: E402

ADMIN_ID = str(ObjectId())


# ---------------------------------------------------------------------------
# In-memory catalog
# ---------------------------------------------------------------------------

class FakeCatalog:
    """Mirrors SongCatalog's interface over plain lists."""

    def __init__(self, songs=None, categories=None, fail_batch=False, reject_titles=()):
        self.songs: list[dict[str, Any]] = []
        self.categories: list[dict[str, Any]] = list(categories or [])
        self.fail_batch = fail_batch
        self.reject_titles = set(reject_titles)
        self.calls: list[tuple] = []
        self.pair_queries: list[list[str]] = []
        for song in songs or []:
            self.add(**song)

    def add(self, **fields) -> str:
        now = datetime.utcnow()
        doc = {
            "_id": str(ObjectId()),
            "status": "draft",
            "featured": False,
            "lyrics_approved": True,
            "chords_approved": True,
            "created_at": now,
            "updated_at": now,
            **fields,
        }
        self.songs.append(doc)
        return doc["_id"]

    def _find(self, song_id):
        for song in self.songs:
            if song["_id"] == song_id:
                return song
        return None

    async def list_songs(self, query=None, status=None, skip=0, limit=50):
        songs = self.songs
        if query:
            q = query.lower()
            songs = [
                s for s in songs
                if any(q in (s.get(key) or "").lower() for key in ("title", "artist", "genre"))
            ]
        if status:
            songs = [s for s in songs if (s.get("status") or "draft") == SongStatus(status).value]
        return [dict(s) for s in songs[skip:skip + limit]], len(songs)

    async def get_song(self, song_id):
        song = self._find(song_id)
        if song is None:
            raise NotFoundError("Song not found")
        return dict(song)

    async def find_existing_pairs(self, titles):
        self.pair_queries.append(list(titles))
        wanted = {title.lower() for title in titles}
        return [(s["title"], s.get("artist")) for s in self.songs if s["title"].lower() in wanted]

    async def insert_songs(self, records):
        self.calls.append(("insert_songs", len(records)))
        if self.fail_batch:
            raise PersistenceError("batch rejected")
        return [self.add(**record.model_dump()) for record in records]

    async def insert_song(self, record):
        self.calls.append(("insert_song", record.title))
        if record.title in self.reject_titles:
            raise PersistenceError(f"rejected {record.title}")
        return self.add(**record.model_dump())

    async def update_song(self, song_id, fields):
        song = self._find(song_id)
        if song is None:
            raise NotFoundError("Song not found")
        song.update(fields)

    async def update_songs(self, song_ids, fields):
        updated = 0
        for song_id in song_ids:
            song = self._find(song_id)
            if song is not None:
                song.update(fields)
                updated += 1
        return updated

    async def delete_song(self, song_id):
        song = self._find(song_id)
        if song is None:
            raise NotFoundError("Song not found")
        self.songs.remove(song)

    async def delete_songs(self, song_ids):
        before = len(self.songs)
        self.songs = [s for s in self.songs if s["_id"] not in set(song_ids)]
        return before - len(self.songs)

    async def list_categories(self):
        return [dict(c) for c in self.categories]

    async def create_category(self, name):
        category = {"_id": str(ObjectId()), "name": name}
        self.categories.append(category)
        return dict(category)

    async def rename_category(self, category_id, name):
        for category in self.categories:
            if category["_id"] == category_id:
                category["name"] = name
                return dict(category)
        raise NotFoundError("Category not found")

    async def delete_category(self, category_id):
        for category in self.categories:
            if category["_id"] == category_id:
                self.categories.remove(category)
                return
        raise NotFoundError("Category not found")


# ---------------------------------------------------------------------------
# In-memory identity administration
# ---------------------------------------------------------------------------

class FakeIdentity:
    def __init__(self, profiles=None):
        self.profiles: dict[str, dict[str, Any]] = {p["_id"]: dict(p) for p in profiles or []}
        self.actions: list[tuple] = []

    async def create_user(self, email, password, role=None, is_admin=False, reason=None):
        user_id = self._new_profile(email, role, is_admin, invited=False)
        self.actions.append(("create_user", email, reason))
        return user_id

    async def invite_user(self, email, role=None, is_admin=False, reason=None):
        pending = [p for p in self.profiles.values() if p["email"] == email and p.get("invited") and not p.get("accepted")]
        if pending:
            self.actions.append(("invite", email, reason))
            return pending[0]["_id"], True
        user_id = self._new_profile(email, role, is_admin, invited=True)
        self.actions.append(("invite", email, reason))
        return user_id, True

    def _new_profile(self, email, role, is_admin, invited):
        if any(p["email"] == email for p in self.profiles.values()):
            raise RequestError("A user with this email address has already been registered")
        user_id = str(ObjectId())
        self.profiles[user_id] = {
            "_id": user_id,
            "email": email,
            "role": role,
            "is_admin": is_admin,
            "invited": invited,
            "created_at": datetime.utcnow(),
        }
        return user_id

    async def reset_password(self, user_id, new_password, reason=None):
        if user_id not in self.profiles:
            raise NotFoundError("User not found")
        self.actions.append(("reset_password", user_id, reason))

    async def delete_user(self, user_id, reason=None):
        if self.profiles.pop(user_id, None) is None:
            raise NotFoundError("User not found")
        self.actions.append(("delete_user", user_id, reason))

    async def list_profiles(self, search=None, role=None, skip=0, limit=20):
        profiles = list(self.profiles.values())
        if search:
            q = search.lower()
            profiles = [p for p in profiles if q in p["email"].lower() or q in (p.get("role") or "").lower()]
        if role:
            profiles = [p for p in profiles if p.get("role") == role]
        return profiles[skip:skip + limit], len(profiles)

    async def update_profile(self, user_id, fields):
        if user_id not in self.profiles:
            raise NotFoundError("User not found")
        self.profiles[user_id].update(fields)
        return dict(self.profiles[user_id])

    # Login and invitation acceptance accept "secret" and "good-token" only
    async def authenticate(self, email, password):
        for profile in self.profiles.values():
            if profile["email"] == email and password == "secret":
                return {"_id": profile["_id"], "email": profile["email"]}
        return None

    async def accept_invite(self, token, password):
        if token != "good-token":
            raise RequestError("Invalid or expired invitation")
        self.actions.append(("accept_invite", token))
        return ADMIN_ID


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_catalog():
    """Factory for catalogs seeded with songs/categories or set up to fail."""
    return FakeCatalog


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def client(catalog, identity):
    """TestClient authenticated as an admin, lifespan not started."""
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_identity_admin] = lambda: identity
    app.dependency_overrides[get_current_admin] = lambda: ADMIN_ID
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(catalog):
    app.dependency_overrides[get_catalog] = lambda: catalog
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_id():
    """Id the `client` fixture is authenticated as"""
    return ADMIN_ID
