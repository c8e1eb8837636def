"""Paired device registry.

The single source of truth for which devices may talk to the server.
Devices live in two in-memory maps (id -> device, token -> id). Pairing and
unpairing update the maps immediately and hand the JSON write to a single
background writer thread, so request handlers never wait on disk.
"""

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from pydantic import ValidationError

from vaultsync.models.device import PairedDevice

logger = logging.getLogger(__name__)


class DeviceRegistry:
    def __init__(self, path: Path):
        self.path = path
        self._devices: dict[str, PairedDevice] = {}
        self._token_to_id: dict[str, str] = {}
        self._io_lock = threading.Lock()
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="registry-writer")

    def load(self) -> None:
        """Load devices from disk. Missing or malformed files yield an empty registry."""
        self._devices.clear()
        self._token_to_id.clear()

        if not self.path.exists():
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            devices = [PairedDevice.model_validate(d) for d in data.get("devices", [])]
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            logger.warning("Failed to load paired devices from %s: %s", self.path, e)
            return

        for device in devices:
            self._devices[device.id] = device
            self._token_to_id[device.token] = device.id
        logger.info("Loaded %d paired device(s)", len(self._devices))

    def persist(self) -> None:
        """Write the full device set back to disk. Failures are logged, not raised."""
        with self._io_lock:
            payload = {
                "devices": [d.model_dump(by_alias=True) for d in list(self._devices.values())],
            }
            self._write(payload)

    def _write(self, payload: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error("Failed to save paired devices to %s: %s", self.path, e)

    def persist_later(self) -> None:
        """Queue a persist on the writer thread and return immediately."""
        self._writer.submit(self.persist)

    def flush(self) -> None:
        """Block until every queued write has finished."""
        self._writer.submit(lambda: None).result()

    def register(self, device: PairedDevice) -> None:
        if device.token in self._token_to_id:
            raise ValueError("Token already registered")
        self._devices[device.id] = device
        self._token_to_id[device.token] = device.id
        self.persist_later()

    def revoke(self, device_id: str) -> bool:
        device = self._devices.pop(device_id, None)
        if device is None:
            return False
        self._token_to_id.pop(device.token, None)
        self.persist_later()
        return True

    def resolve_token(self, token: str) -> str | None:
        device_id = self._token_to_id.get(token)
        if device_id is None or device_id not in self._devices:
            return None
        return device_id

    def get(self, device_id: str) -> PairedDevice | None:
        return self._devices.get(device_id)

    def touch(self, device_id: str, now: int) -> None:
        """Bump lastSeen in memory; flushed with the next persist."""
        device = self._devices.get(device_id)
        if device is not None:
            device.last_seen = now

    def list(self) -> list[PairedDevice]:
        return list(self._devices.values())

    def __len__(self) -> int:
        return len(self._devices)
