"""Song action endpoint and per-song routes."""

from bson import ObjectId

SONGS = "/api/v1/songs/"


def act(client, action=None, **body):
    payload = dict(body)
    if action is not None:
        payload["action"] = action
    return client.post(SONGS, json=payload)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_missing_action(self, client):
        response = act(client)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing action"}

    def test_unknown_action(self, client):
        response = act(client, "explode")
        assert response.status_code == 400
        assert response.json() == {"error": "Unknown action"}

    def test_requires_authentication(self, anonymous_client):
        response = anonymous_client.post(SONGS, json={"action": "insert", "data": {"title": "x"}})
        assert response.status_code == 401
        assert "error" in response.json()


# ---------------------------------------------------------------------------
# Single-song actions
# ---------------------------------------------------------------------------

class TestSingleActions:
    def test_insert(self, client, catalog):
        response = act(client, "insert", data={"title": " Hymn ", "artist": "Choir"})
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert catalog.songs[0]["_id"] == body["id"]
        assert catalog.songs[0]["title"] == "Hymn"

    def test_insert_without_data(self, client):
        assert act(client, "insert").json() == {"error": "Missing data"}

    def test_insert_invalid_record(self, client):
        response = act(client, "insert", data={"title": "x", "status": "live"})
        assert response.status_code == 400
        assert response.json()["error"].startswith("status")

    def test_update(self, client, catalog):
        song_id = catalog.add(title="Old")
        response = act(client, "update", id=song_id, data={"title": "New"})
        assert response.json() == {"ok": True}
        assert catalog.songs[0]["title"] == "New"

    def test_update_requires_id_and_data(self, client):
        assert act(client, "update", data={"title": "x"}).json() == {"error": "Missing id or data"}

    def test_update_rejects_unknown_fields(self, client, catalog):
        song_id = catalog.add(title="Old")
        response = act(client, "update", id=song_id, data={"plays": 5})
        assert response.status_code == 400

    def test_update_missing_song(self, client):
        response = act(client, "update", id=str(ObjectId()), data={"title": "x"})
        assert response.status_code == 404
        assert response.json() == {"error": "Song not found"}

    def test_delete(self, client, catalog):
        song_id = catalog.add(title="Gone")
        assert act(client, "delete", id=song_id).json() == {"ok": True}
        assert catalog.songs == []

    def test_delete_requires_id(self, client):
        assert act(client, "delete").json() == {"error": "Missing id"}

    def test_moderation_patch_limited_to_moderation_fields(self, client, catalog):
        song_id = catalog.add(title="T", pending_lyrics="new words")
        ok = act(client, "moderation", id=song_id, data={"lyrics_approved": False})
        assert ok.json() == {"ok": True}
        assert catalog.songs[0]["lyrics_approved"] is False

        rejected = act(client, "moderation", id=song_id, data={"title": "sneaky"})
        assert rejected.status_code == 400


# ---------------------------------------------------------------------------
# Bulk actions
# ---------------------------------------------------------------------------

class TestBulkActions:
    def test_bulk_insert_all_new(self, client, catalog):
        response = act(client, "bulk_insert", data=[{"title": "A"}, {"title": "B"}])
        assert response.status_code == 200
        assert response.json() == {"ok": True, "inserted": 2, "errors": [], "skipped": []}

    def test_bulk_insert_partial_success(self, client):
        response = act(client, "bulk_insert", data=[{"title": "New"}, {"artist": "nameless"}])
        assert response.status_code == 207
        body = response.json()
        assert body["ok"] is False
        assert body["inserted"] == 1
        assert body["errors"] == [{"index": 1, "error": "Missing required field: title"}]

    def test_bulk_insert_duplicate_skipped(self, client, catalog):
        catalog.add(title="Hymn", artist="Choir")
        response = act(client, "bulk_insert", data=[{"title": "hymn", "singer": "CHOIR"}])
        assert response.status_code == 207
        assert response.json()["skipped"] == [{"index": 0, "reason": "Duplicate (title+artist)"}]

    def test_bulk_insert_requires_array(self, client):
        for data in ([], "not-an-array", None):
            response = act(client, "bulk_insert", data=data)
            assert response.status_code == 400
            assert response.json() == {"error": "Missing data array"}

    def test_bulk_delete(self, client, catalog):
        ids = [catalog.add(title="A"), catalog.add(title="B"), catalog.add(title="C")]
        response = act(client, "bulk_delete", data=ids[:2])
        assert response.json() == {"ok": True, "deleted": 2}
        assert [s["title"] for s in catalog.songs] == ["C"]

    def test_bulk_delete_requires_ids(self, client):
        assert act(client, "bulk_delete", data={}).json() == {"error": "Missing ids array"}

    def test_bulk_update_publishes(self, client, catalog):
        ids = [catalog.add(title="A"), catalog.add(title="B")]
        response = act(client, "bulk_update", data={"ids": ids, "updates": {"status": "published"}})
        assert response.json() == {"ok": True, "updated": 2}
        assert {s["status"] for s in catalog.songs} == {"published"}

    def test_bulk_update_needs_fields(self, client, catalog):
        song_id = catalog.add(title="A")
        response = act(client, "bulk_update", data={"ids": [song_id], "updates": {}})
        assert response.json() == {"error": "No valid fields provided for update"}

    def test_bulk_update_needs_object(self, client):
        assert act(client, "bulk_update", data=["x"]).json() == {"error": "Missing ids or updates"}


# ---------------------------------------------------------------------------
# Listing and per-song routes
# ---------------------------------------------------------------------------

class TestSongRoutes:
    def test_list_with_search_and_status(self, client, catalog):
        catalog.add(title="Morning Hymn", status="published")
        catalog.add(title="Evening Hymn")
        catalog.add(title="Rock Song", genre="Rock")

        body = client.get(SONGS, params={"query": "hymn", "status": "draft"}).json()
        assert body["total"] == 1
        assert body["songs"][0]["title"] == "Evening Hymn"
        assert "_id" in body["songs"][0]

    def test_list_rejects_unknown_status(self, client):
        assert client.get(SONGS, params={"status": "live"}).status_code == 422

    def test_get(self, client, catalog):
        song_id = catalog.add(title="One")
        assert client.get(f"{SONGS}{song_id}").json()["title"] == "One"

    def test_get_missing(self, client):
        assert client.get(f"{SONGS}{ObjectId()}").status_code == 404

    def test_duplicate_creates_draft_copy(self, client, catalog):
        song_id = catalog.add(
            title="Original", status="published", featured=True,
            pending_chords="Am", chords_approved=False, lyrics="words",
        )
        response = client.post(f"{SONGS}{song_id}/duplicate")
        assert response.status_code == 201
        copy = catalog.songs[-1]
        assert copy["_id"] == response.json()["id"]
        assert copy["title"] == "Copy of Original"
        assert copy["status"] == "draft"
        assert copy["featured"] is False
        assert copy["pending_chords"] is None
        assert copy["chords_approved"] is True
        assert copy["lyrics"] == "words"

    def test_approve_pending_lyrics(self, client, catalog):
        song_id = catalog.add(title="T", lyrics="old", pending_lyrics="new", lyrics_approved=False)
        response = client.post(f"{SONGS}{song_id}/moderation", json={"field": "lyrics", "decision": "approve"})
        assert response.status_code == 200
        assert response.json()["lyrics"] == "new"
        song = catalog.songs[0]
        assert song["lyrics"] == "new"
        assert song["pending_lyrics"] is None
        assert song["lyrics_approved"] is True

    def test_reject_pending_chords(self, client, catalog):
        song_id = catalog.add(title="T", chords="G", pending_chords="Em")
        client.post(f"{SONGS}{song_id}/moderation", json={"field": "chords", "decision": "reject"})
        song = catalog.songs[0]
        assert song["chords"] == "G"
        assert song["pending_chords"] is None
        assert song["chords_approved"] is False

    def test_approve_without_pending(self, client, catalog):
        song_id = catalog.add(title="T")
        response = client.post(f"{SONGS}{song_id}/moderation", json={"field": "chords", "decision": "approve"})
        assert response.status_code == 400
        assert response.json() == {"error": "No pending chords to approve"}


class TestCoverUpload:
    def test_uploads_through_storage(self, client, monkeypatch):
        from app.api.v1 import songs

        monkeypatch.setattr(
            songs, "upload_cover",
            lambda content, filename: (True, f"https://cdn.example.com/covers/{filename}", f"covers/{filename}"),
        )
        response = client.post(f"{SONGS}cover", files={"cover": ("c.png", b"\x89PNG", "image/png")})
        assert response.json() == {
            "ok": True,
            "cover_url": "https://cdn.example.com/covers/c.png",
            "object_key": "covers/c.png",
        }

    def test_storage_failure(self, client, monkeypatch):
        from app.api.v1 import songs

        monkeypatch.setattr(songs, "upload_cover", lambda content, filename: (False, "not configured", None))
        response = client.post(f"{SONGS}cover", files={"cover": ("c.png", b"x", "image/png")})
        assert response.status_code == 400
        assert response.json() == {"error": "Cover upload failed: not configured"}

    def test_too_large(self, client, monkeypatch):
        from app.core.config import settings

        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
        response = client.post(f"{SONGS}cover", files={"cover": ("c.png", b"12345", "image/png")})
        assert response.status_code == 413
