import pytest

from vaultsync.models.device import PairedDevice
from vaultsync.services.auth_service import authenticate, extract_token
from vaultsync.services.device_registry import DeviceRegistry
from vaultsync.utils.security import generate_device_token, generate_pairing_code

TOKEN = "f" * 64


@pytest.fixture()
def registry(tmp_path):
    registry = DeviceRegistry(tmp_path / "mobile-devices.json")
    registry.register(PairedDevice(
        id="dev-1", name="Pixel", platform="android", token=TOKEN, paired_at=1, last_seen=1,
    ))
    return registry


@pytest.mark.parametrize("method,headers,query,expected", [
    ("GET", {"authorization": f"Bearer {TOKEN}"}, {}, TOKEN),
    ("POST", {"authorization": f"Bearer {TOKEN}"}, {}, TOKEN),
    ("GET", {}, {"token": TOKEN}, TOKEN),
    ("HEAD", {}, {"token": TOKEN}, TOKEN),
    ("POST", {}, {"token": TOKEN}, None),
    ("GET", {"authorization": f"Basic {TOKEN}"}, {}, None),
    ("GET", {"authorization": "Bearer "}, {}, None),
    ("GET", {}, {}, None),
])
def test_extract_token(method, headers, query, expected):
    assert extract_token(method, headers, query) == expected


def test_header_takes_precedence_over_query():
    token = extract_token("GET", {"authorization": "Bearer header-token"}, {"token": "query-token"})
    assert token == "header-token"


def test_authenticate(registry):
    assert authenticate(registry, "GET", {"authorization": f"Bearer {TOKEN}"}, {}) == "dev-1"
    assert authenticate(registry, "GET", {"authorization": "Bearer unknown"}, {}) is None

    registry.revoke("dev-1")
    assert authenticate(registry, "GET", {"authorization": f"Bearer {TOKEN}"}, {}) is None


def test_generated_credentials():
    assert len(generate_device_token()) == 64
    assert generate_device_token() != generate_device_token()

    code = generate_pairing_code(6)
    assert len(code) == 6 and code.isdigit()
