"""Request dispatcher: CORS, public/local/protected split, top-level errors.

Every request passes through here before routing. Public paths skip
authentication, ``/api/admin/`` paths are restricted to loopback clients,
and everything else needs a valid device token. Authentication failures
never reach a handler.
"""

import ipaddress
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from vaultsync.services.auth_service import authenticate
from vaultsync.sync_server import SyncServer

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/api/ping", "/api/pair", "/api/pair/status"})
LOCAL_PREFIX = "/api/admin/"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Range",
}


def is_loopback(host: str) -> bool:
    """True for loopback clients, including IPv4-mapped IPv6 (::ffff:127.0.0.1)."""
    if host == "localhost":
        return True
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    if ip.version == 6 and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return ip.is_loopback


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class DispatchMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, server: SyncServer):
        super().__init__(app)
        self.server = server

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        response = await self._dispatch(request, call_next)
        response.headers.update(CORS_HEADERS)
        return response

    async def _dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path

        if path in PUBLIC_PATHS:
            pass
        elif path.startswith(LOCAL_PREFIX):
            client_ip = request.client.host if request.client else ""
            if not is_loopback(client_ip):
                return error_response(403, "Local access only")
        else:
            device_id = authenticate(
                self.server.registry,
                request.method,
                request.headers,
                request.query_params,
            )
            if device_id is None:
                return error_response(401, "Unauthorized")
            self.server.registry.touch(device_id, self.server.clock())
            request.state.device_id = device_id

        try:
            return await call_next(request)
        except Exception:
            logger.exception("Request error: %s %s", request.method, path)
            return error_response(500, "Internal server error")
