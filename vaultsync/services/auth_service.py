"""Request authentication: bearer token -> device id."""

from collections.abc import Mapping

from vaultsync.services.device_registry import DeviceRegistry

# Media elements (<img>, <video>) cannot attach headers, so reads may pass
# the token as a query parameter instead.
QUERY_TOKEN_METHODS = ("GET", "HEAD")


def extract_token(method: str, headers: Mapping[str, str], query: Mapping[str, str]) -> str | None:
    auth_header = headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token

    if method.upper() in QUERY_TOKEN_METHODS:
        return query.get("token") or None
    return None


def authenticate(
    registry: DeviceRegistry,
    method: str,
    headers: Mapping[str, str],
    query: Mapping[str, str],
) -> str | None:
    """Resolve the request's credentials to a device id, or None."""
    token = extract_token(method, headers, query)
    if not token:
        return None
    return registry.resolve_token(token)
