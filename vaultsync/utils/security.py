"""Security utilities: pairing code and device token generation."""

import secrets
import uuid

TOKEN_BYTES = 32  # 256 bits


def generate_pairing_code(length: int = 6) -> str:
    """Generate a random zero-padded numeric code of the given length."""
    return str(secrets.randbelow(10 ** length)).zfill(length)


def generate_device_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def generate_device_id() -> str:
    return str(uuid.uuid4())
