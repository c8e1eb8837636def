"""Pairing session management.

Pairing codes are short-lived and single-use: each one is either consumed
by a successful pairing or dropped once it expires. Sessions live in memory
only; a server restart invalidates every outstanding code.
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable

from vaultsync.models.device import PLATFORMS, PairedDevice
from vaultsync.services.device_registry import DeviceRegistry
from vaultsync.services.errors import PairingRejected
from vaultsync.utils.security import generate_device_id, generate_device_token, generate_pairing_code
from vaultsync.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

QR_PAYLOAD_TYPE = "vault-mobile-pair"


@dataclass
class PairingSession:
    code: str
    expires_at: int  # epoch ms


@dataclass
class PairingTicket:
    code: str
    expires_at: int
    qr_data: str


class PairingManager:
    def __init__(
        self,
        registry: DeviceRegistry,
        ttl_ms: int = 5 * 60 * 1000,
        code_length: int = 6,
        addresses: Callable[[], list[str]] = list,
        clock: Callable[[], int] = now_ms,
        on_paired: Callable[[PairedDevice], None] | None = None,
    ):
        self.registry = registry
        self.ttl_ms = ttl_ms
        self.code_length = code_length
        self._addresses = addresses
        self._clock = clock
        self._on_paired = on_paired
        self._sessions: dict[str, PairingSession] = {}

    def create(self) -> PairingTicket:
        """Generate a fresh pairing code plus the QR discovery payload."""
        now = self._clock()
        self.sweep(now)

        code = generate_pairing_code(self.code_length)
        while code in self._sessions:
            code = generate_pairing_code(self.code_length)

        expires_at = now + self.ttl_ms
        self._sessions[code] = PairingSession(code=code, expires_at=expires_at)

        qr_data = json.dumps({
            "type": QR_PAYLOAD_TYPE,
            "code": code,
            "addresses": self._addresses(),
            "expiresAt": expires_at,
        })
        logger.info("Generated pairing code (expires in %ds)", self.ttl_ms // 1000)
        return PairingTicket(code=code, expires_at=expires_at, qr_data=qr_data)

    def status(self, code: str) -> dict:
        """Report whether a code is still redeemable. Evicts it if expired."""
        session = self._sessions.get(code)
        if session is None:
            return {"valid": False, "reason": "not_found"}

        now = self._clock()
        if session.expires_at < now:
            del self._sessions[code]
            return {"valid": False, "reason": "expired"}

        return {
            "valid": True,
            "expiresAt": session.expires_at,
            "remainingMs": session.expires_at - now,
        }

    def consume(self, code: str, device_name: str, platform: str | None = None) -> PairedDevice:
        """Redeem a code for a new device identity and token.

        Raises PairingRejected if the code is unknown or expired, or the
        request is incomplete.
        """
        device_name = (device_name or "").strip()
        if not code or not device_name:
            raise PairingRejected("Missing code or deviceName")

        platform = platform or "android"
        if platform not in PLATFORMS:
            raise PairingRejected("Unsupported platform")

        now = self._clock()
        session = self._sessions.pop(code, None)
        if session is None or session.expires_at < now:
            logger.warning("Rejected pairing attempt from %r: invalid or expired code", device_name)
            raise PairingRejected("Invalid or expired pairing code")

        token = generate_device_token()
        while self.registry.resolve_token(token) is not None:
            token = generate_device_token()

        device = PairedDevice(
            id=generate_device_id(),
            name=device_name,
            platform=platform,
            token=token,
            paired_at=now,
            last_seen=now,
        )
        self.registry.register(device)

        logger.info("Device paired: %s (%s)", device.name, device.platform)
        if self._on_paired is not None:
            self._on_paired(device)
        return device

    def sweep(self, now: int | None = None) -> int:
        """Drop every expired session. Returns how many were removed."""
        now = self._clock() if now is None else now
        expired = [c for c, s in self._sessions.items() if s.expires_at < now]
        for code in expired:
            del self._sessions[code]
        return len(expired)

    @property
    def active_count(self) -> int:
        return len(self._sessions)
