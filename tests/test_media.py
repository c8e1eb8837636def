from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tests.conftest import pair_device
from vaultsync.main import create_app
from vaultsync.services.collaborators import Collaborators
from vaultsync.services.media_service import RangeNotSatisfiable, parse_range
from vaultsync.services.thumbnail_service import ThumbnailService
from vaultsync.sync_server import SyncServer


@pytest.fixture()
def video(store, video_file):
    return store.add_media(video_file, duration_sec=12.5, tags=["travel"])


# --- parse_range ---

@pytest.mark.parametrize("header,expected", [
    (None, None),
    ("", None),
    ("items=0-5", None),
    ("bytes=0-99", (0, 99)),
    ("bytes=900-", (900, 999)),
    ("bytes=990-5000", (990, 999)),
    ("bytes=-10", (990, 999)),
    ("bytes=-5000", (0, 999)),
])
def test_parse_range(header, expected):
    assert parse_range(header, 1000) == expected


@pytest.mark.parametrize("header", ["bytes=1000-", "bytes=500-100", "bytes=-0"])
def test_parse_range_unsatisfiable(header):
    with pytest.raises(RangeNotSatisfiable):
        parse_range(header, 1000)


# --- Streaming ---

def test_stream_full_file(client, auth_headers, video, video_file):
    response = client.get(f"/api/media/{video.id}/stream", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["accept-ranges"] == "bytes"
    assert response.headers["content-type"] == "video/mp4"
    assert response.content == video_file.read_bytes()


def test_stream_byte_range(client, auth_headers, video, video_file):
    headers = {**auth_headers, "Range": "bytes=0-99"}
    response = client.get(f"/api/media/{video.id}/stream", headers=headers)

    assert response.status_code == 206
    assert response.headers["content-range"] == "bytes 0-99/1000"
    assert response.headers["content-length"] == "100"
    assert response.content == video_file.read_bytes()[:100]


def test_stream_open_ended_range(client, auth_headers, video, video_file):
    headers = {**auth_headers, "Range": "bytes=900-"}
    response = client.get(f"/api/media/{video.id}/stream", headers=headers)

    assert response.status_code == 206
    assert response.headers["content-range"] == "bytes 900-999/1000"
    assert response.content == video_file.read_bytes()[900:]


def test_stream_unsatisfiable_range(client, auth_headers, video):
    headers = {**auth_headers, "Range": "bytes=5000-"}
    response = client.get(f"/api/media/{video.id}/stream", headers=headers)

    assert response.status_code == 416
    assert response.headers["content-range"] == "bytes */1000"


def test_stream_with_query_token(client, sync_server, video):
    token = pair_device(client, sync_server)["token"]
    response = client.get(f"/api/media/{video.id}/stream", params={"token": token})
    assert response.status_code == 200


def test_stream_unknown_media(client, auth_headers):
    response = client.get("/api/media/med_missing/stream", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Media not found"}


def test_stream_missing_file(client, auth_headers, store, video_file):
    media = store.add_media(video_file)
    video_file.unlink()

    response = client.get(f"/api/media/{media.id}/stream", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}


def test_stream_unknown_extension_is_octet_stream(client, auth_headers, store, tmp_path):
    path = tmp_path / "media" / "blob.xyz"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"0123456789")
    media = store.add_media(path, type="video")

    response = client.get(f"/api/media/{media.id}/stream", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"


# --- Thumbnails ---

class FailingThumbnails:
    def generate(self, media):
        raise OSError("renderer crashed")


def _thumb_client(settings, store, thumbnails):
    server = SyncServer(settings, Collaborators.from_store(store, thumbnails=thumbnails))
    return server, TestClient(create_app(server))


def test_thumb_uses_stored_thumbnail(client, auth_headers, store, video_file, image_file):
    media = store.add_media(video_file, thumb_path=str(image_file))

    response = client.get(f"/api/media/{media.id}/thumb", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["cache-control"] == "public, max-age=86400"
    assert response.content == image_file.read_bytes()


def test_thumb_generated_on_demand(settings, store, image_file):
    media = store.add_media(image_file)
    thumbnails = ThumbnailService(store, settings.thumbnail_dir, size=32)
    server, test_client = _thumb_client(settings, store, thumbnails)

    with test_client as client:
        headers = {"Authorization": f"Bearer {pair_device(client, server)['token']}"}
        response = client.get(f"/api/media/{media.id}/thumb", headers=headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"

        item = client.get(f"/api/library/{media.id}", headers=headers).json()
        assert item["hasThumb"] is True

    assert Path(store.get_media(media.id).media.thumb_path).exists()


def test_thumb_falls_back_to_original_image(settings, store, image_file):
    media = store.add_media(image_file)
    server, test_client = _thumb_client(settings, store, FailingThumbnails())

    with test_client as client:
        headers = {"Authorization": f"Bearer {pair_device(client, server)['token']}"}
        response = client.get(f"/api/media/{media.id}/thumb", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == image_file.read_bytes()


def test_thumb_not_found_for_video_without_thumbnail(client, auth_headers, video):
    response = client.get(f"/api/media/{video.id}/thumb", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Thumbnail not found"}


# --- Ratings, views, stats, markers ---

def test_rate_and_stats(client, auth_headers, video):
    response = client.post(f"/api/media/{video.id}/rate", json={"rating": 4}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "mediaId": video.id, "rating": 4, "views": 0}

    client.post(f"/api/media/{video.id}/rate", json={"rating": 2}, headers=auth_headers)
    stats = client.get(f"/api/media/{video.id}/stats", headers=auth_headers).json()
    assert stats["rating"] == 2


@pytest.mark.parametrize("body", [{"rating": 6}, {"rating": -1}, {}])
def test_rate_out_of_range(client, auth_headers, video, body):
    response = client.post(f"/api/media/{video.id}/rate", json=body, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Rating must be a number between 0 and 5"}


def test_rate_unknown_media(client, auth_headers):
    response = client.post("/api/media/med_missing/rate", json={"rating": 3}, headers=auth_headers)
    assert response.status_code == 404


def test_single_views_are_additive(client, auth_headers, video):
    client.post(f"/api/media/{video.id}/view", headers=auth_headers)
    response = client.post(f"/api/media/{video.id}/view", headers=auth_headers)

    assert response.json()["views"] == 2
    assert response.json()["lastViewedAt"] is not None


def test_stats_for_unviewed_media(client, auth_headers, video):
    stats = client.get(f"/api/media/{video.id}/stats", headers=auth_headers).json()
    assert stats == {
        "mediaId": video.id,
        "rating": 0,
        "views": 0,
        "oCount": 0,
        "lastViewedAt": None,
    }


def test_markers(client, auth_headers, video):
    url = f"/api/media/{video.id}/markers"
    client.post(url, json={"timeSec": 30.0, "title": "Intro"}, headers=auth_headers)
    client.post(url, json={"timeSec": 12.0}, headers=auth_headers)
    client.post(url, json={"timeSec": 12.0}, headers=auth_headers)

    markers = client.get(url, headers=auth_headers).json()["markers"]
    assert [m["timeSec"] for m in markers] == [12.0, 12.0, 30.0]
    assert markers[0]["title"] == "Marker @ 12.0s"
    assert markers[-1]["title"] == "Intro"


@pytest.mark.parametrize("body", [{"timeSec": -1}, {"title": "no time"}])
def test_marker_requires_time(client, auth_headers, video, body):
    response = client.post(f"/api/media/{video.id}/markers", json=body, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "timeSec must be a positive number"}
