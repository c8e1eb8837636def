"""LAN address discovery for the pairing QR payload."""

import socket


def _get_local_ip() -> str | None:
    """Get the actual local network IP (WiFi/LAN), not 0.0.0.0."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
        finally:
            s.close()
    except OSError:
        return None


def get_local_addresses(port: int) -> list[str]:
    """Return ``http://<ip>:<port>`` for every non-loopback IPv4 address."""
    ips: list[str] = []
    primary = _get_local_ip()
    if primary:
        ips.append(primary)
    try:
        _, _, host_ips = socket.gethostbyname_ex(socket.gethostname())
    except OSError:
        host_ips = []
    for ip in host_ips:
        if ip not in ips:
            ips.append(ip)
    return [f"http://{ip}:{port}" for ip in ips if not ip.startswith("127.")]
