"""Domain errors raised by services and translated to HTTP by the API layer."""


class PairingRejected(ValueError):
    """A pairing attempt failed validation (bad/expired code, missing fields)."""


class NotConfigured(RuntimeError):
    """A required collaborator was never wired into the server."""

    def __init__(self, service: str):
        super().__init__(f"{service} service not available")
        self.service = service
