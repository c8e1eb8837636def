"""Sync server container.

Owns the device registry, the pairing manager and the library
collaborators. Built once at startup and handed to ``create_app``.
Lifecycle transitions are reported to registered observers as
``(event, payload)`` calls: ``started``, ``stopped``, ``device_paired``,
``device_unpaired``.
"""

import logging
from typing import Callable

from vaultsync.config import Settings
from vaultsync.models.device import PairedDevice
from vaultsync.services.collaborators import Collaborators
from vaultsync.services.device_registry import DeviceRegistry
from vaultsync.services.pairing_service import PairingManager, PairingTicket
from vaultsync.utils.network import get_local_addresses
from vaultsync.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

Observer = Callable[[str, dict], None]


class SyncServer:
    def __init__(
        self,
        settings: Settings,
        collaborators: Collaborators | None = None,
        registry: DeviceRegistry | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings
        self.collaborators = collaborators or Collaborators()
        self.clock = clock
        self.running = False
        self._observers: list[Observer] = []

        if registry is None:
            registry = DeviceRegistry(settings.devices_file)
            registry.load()
        self.registry = registry

        self.pairing = PairingManager(
            registry,
            ttl_ms=settings.pairing_code_ttl_seconds * 1000,
            code_length=settings.pairing_code_length,
            addresses=self.addresses,
            clock=clock,
            on_paired=lambda device: self._notify("device_paired", _public_device(device)),
        )

    # --- Observers ---

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def _notify(self, event: str, payload: dict) -> None:
        for observer in self._observers:
            try:
                observer(event, payload)
            except Exception:
                logger.exception("Observer failed handling %s", event)

    # --- Lifecycle ---

    def start(self) -> None:
        self.running = True
        addresses = self.addresses()
        logger.info("Sync server started on port %d", self.settings.port)
        logger.info("Accessible at: %s", ", ".join(addresses) or "(no LAN address)")
        self._notify("started", {"port": self.settings.port, "addresses": addresses})

    def stop(self) -> None:
        # Drain queued writes, then flush lastSeen updates kept only in memory
        self.registry.flush()
        self.registry.persist()
        self.running = False
        logger.info("Sync server stopped")
        self._notify("stopped", {})

    def addresses(self) -> list[str]:
        return get_local_addresses(self.settings.port)

    def status(self) -> dict:
        return {
            "running": self.running,
            "port": self.settings.port,
            "addresses": self.addresses() if self.running else [],
            "pairedDevices": len(self.registry),
        }

    # --- Desktop-side device management ---

    def generate_pairing_code(self) -> PairingTicket:
        return self.pairing.create()

    def paired_devices(self) -> list[PairedDevice]:
        return self.registry.list()

    def unpair_device(self, device_id: str) -> bool:
        device = self.registry.get(device_id)
        if device is None or not self.registry.revoke(device_id):
            return False
        logger.info("Device unpaired: %s", device.name)
        self._notify("device_unpaired", _public_device(device))
        return True


def _public_device(device: PairedDevice) -> dict:
    return device.model_dump(by_alias=True, exclude={"token"})
