from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from vaultsync.config import Settings
from vaultsync.database import init_db, make_engine
from vaultsync.main import create_app
from vaultsync.services.collaborators import Collaborators
from vaultsync.services.library_store import LibraryStore
from vaultsync.sync_server import SyncServer

T0 = 1_700_000_000_000


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        devices_file=tmp_path / "config" / "mobile-devices.json",
        db_path=tmp_path / "library.db",
        thumbnail_dir=tmp_path / "thumbs",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(settings: Settings) -> LibraryStore:
    engine = make_engine(settings.db_path)
    init_db(engine)
    return LibraryStore(engine, dedup_window_ms=settings.history_dedup_window_ms)


@pytest.fixture()
def sync_server(settings: Settings, store: LibraryStore, clock: FakeClock) -> SyncServer:
    return SyncServer(settings, Collaborators.from_store(store), clock=clock)


@pytest.fixture()
def client(sync_server: SyncServer):
    app = create_app(sync_server)
    with TestClient(app) as client:
        yield client


def pair_device(client: TestClient, server: SyncServer, name: str = "Test Phone", platform: str = "android") -> dict:
    """Run the full pairing flow and return the pair response body."""
    ticket = server.generate_pairing_code()
    response = client.post("/api/pair", json={
        "code": ticket.code,
        "deviceName": name,
        "platform": platform,
    })
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture()
def auth_headers(client: TestClient, sync_server: SyncServer) -> dict[str, str]:
    token = pair_device(client, sync_server)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def video_file(tmp_path: Path) -> Path:
    path = tmp_path / "media" / "clip.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(bytes(i % 256 for i in range(1000)))
    return path


@pytest.fixture()
def image_file(tmp_path: Path) -> Path:
    from PIL import Image

    path = tmp_path / "media" / "photo.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (64, 48), "red").save(path)
    return path
