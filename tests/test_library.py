import pytest


@pytest.fixture()
def library(store, tmp_path):
    """Four playable files plus one unsupported document."""
    media_dir = tmp_path / "media"
    media_dir.mkdir(exist_ok=True)
    items = {}
    for i, name in enumerate(["beach.mp4", "alps.mov", "cat.jpg", "dance.gif", "notes.txt"]):
        path = media_dir / name
        path.write_bytes(b"x" * (100 * (i + 1)))
        items[name] = store.add_media(path, added_at=1000 + i)
    store.tag_media(items["beach.mp4"].id, "travel")
    store.tag_media(items["alps.mov"].id, "travel")
    store.tag_media(items["alps.mov"].id, "snow")
    return items


def test_library_lists_newest_first(client, auth_headers, library):
    body = client.get("/api/library", headers=auth_headers).json()

    assert [i["filename"] for i in body["items"]] == ["dance.gif", "cat.jpg", "alps.mov", "beach.mp4"]
    assert body["totalCount"] == 4
    assert body["hasMore"] is False


def test_library_items_never_expose_paths(client, auth_headers, library):
    items = client.get("/api/library", headers=auth_headers).json()["items"]
    for item in items:
        assert "path" not in item
        assert "thumbPath" not in item
        assert str(library["beach.mp4"].path) not in str(item)


def test_library_item_fields(client, auth_headers, library):
    media = library["alps.mov"]
    item = client.get(f"/api/library/{media.id}", headers=auth_headers).json()

    assert item == {
        "id": media.id,
        "filename": "alps.mov",
        "type": "video",
        "durationSec": None,
        "sizeBytes": 200,
        "width": None,
        "height": None,
        "addedAt": 1001,
        "rating": 0,
        "viewCount": 0,
        "tags": ["snow", "travel"],
        "hasThumb": False,
    }


def test_library_item_not_found(client, auth_headers):
    response = client.get("/api/library/med_missing", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Media not found"}


def test_library_pagination(client, auth_headers, library):
    first = client.get("/api/library", params={"limit": 3}, headers=auth_headers).json()
    second = client.get("/api/library", params={"limit": 3, "page": 2}, headers=auth_headers).json()

    assert len(first["items"]) == 3
    assert first["hasMore"] is True
    assert [i["filename"] for i in second["items"]] == ["beach.mp4"]
    assert second["hasMore"] is False


def test_library_limit_is_capped(client, auth_headers, library):
    body = client.get("/api/library", params={"limit": 1000}, headers=auth_headers).json()
    assert body["limit"] == 100


@pytest.mark.parametrize("params,expected", [
    ({"type": "video"}, {"beach.mp4", "alps.mov"}),
    ({"type": "gif"}, {"dance.gif"}),
    ({"tags": "travel"}, {"beach.mp4", "alps.mov"}),
    ({"tags": "travel,snow"}, {"alps.mov"}),
    ({"search": "CAT"}, {"cat.jpg"}),
])
def test_library_filters(client, auth_headers, library, params, expected):
    items = client.get("/api/library", params=params, headers=auth_headers).json()["items"]
    assert {i["filename"] for i in items} == expected


def test_library_sort_by_name(client, auth_headers, library):
    items = client.get("/api/library", params={"sort": "name"}, headers=auth_headers).json()["items"]
    assert [i["filename"] for i in items] == ["alps.mov", "beach.mp4", "cat.jpg", "dance.gif"]


def test_tags(client, auth_headers, library):
    assert client.get("/api/tags", headers=auth_headers).json() == {"tags": ["snow", "travel"]}


# --- Playlists ---

def test_playlists(client, auth_headers, store, library):
    playlist = store.create_playlist("Favourites")
    url = f"/api/playlists/{playlist.id}"

    response = client.post(
        f"{url}/items",
        json={"mediaIds": [library["cat.jpg"].id, "med_missing", library["beach.mp4"].id]},
        headers=auth_headers,
    )
    assert response.json() == {"success": True, "added": 2}

    listing = client.get("/api/playlists", headers=auth_headers).json()["items"]
    assert listing[0]["id"] == playlist.id
    assert listing[0]["itemCount"] == 2

    detail = client.get(url, headers=auth_headers).json()
    assert [i["filename"] for i in detail["items"]] == ["cat.jpg", "beach.mp4"]
    assert all("path" not in i for i in detail["items"])


def test_playlist_not_found(client, auth_headers):
    assert client.get("/api/playlists/pls_missing", headers=auth_headers).status_code == 404
    response = client.post(
        "/api/playlists/pls_missing/items",
        json={"mediaIds": ["med_1"]},
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Playlist not found"}


def test_playlist_add_requires_media_ids(client, auth_headers, store):
    playlist = store.create_playlist("Empty")
    response = client.post(f"/api/playlists/{playlist.id}/items", json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "mediaIds array is required"}


# --- Downloads ---

def test_queue_download(client, auth_headers):
    response = client.post(
        "/api/download",
        json={"url": "https://example.com/videos/clip%201.mp4"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    download = response.json()["download"]
    assert download["status"] == "queued"
    assert download["title"] == "clip 1.mp4"

    items = client.get("/api/downloads", headers=auth_headers).json()["items"]
    assert [d["id"] for d in items] == [download["id"]]


@pytest.mark.parametrize("url,message", [
    ("", "URL is required"),
    ("   ", "URL is required"),
    ("not a url", "Invalid URL format"),
    ("ftp://example.com/file", "Invalid URL format"),
])
def test_queue_download_rejects_bad_urls(client, auth_headers, url, message):
    response = client.post("/api/download", json={"url": url}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": message}


# --- Devices ---

def test_devices_listing_hides_tokens(client, auth_headers):
    devices = client.get("/api/devices", headers=auth_headers).json()["devices"]
    assert len(devices) == 1
    assert set(devices[0]) == {"id", "name", "platform", "pairedAt", "lastSeen"}


def test_search_treats_wildcards_literally(client, auth_headers, store, tmp_path):
    media_dir = tmp_path / "media"
    media_dir.mkdir(exist_ok=True)
    for name in ["a_b.mp4", "axb.mp4", "100%.mp4", "100x.mp4"]:
        path = media_dir / name
        path.write_bytes(b"x")
        store.add_media(path)

    def search(text):
        items = client.get("/api/library", params={"search": text}, headers=auth_headers).json()["items"]
        return {i["filename"] for i in items}

    assert search("_") == {"a_b.mp4"}
    assert search("%") == {"100%.mp4"}
    assert search("a_b") == {"a_b.mp4"}
