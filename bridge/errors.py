"""
Error kinds raised by the bridge HTTP layer and CRM client.
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for every failure surfaced by the bridge."""
    kind = 'bridge_error'


class ConfigurationError(BridgeError):
    """Raised when required configuration (webhook URL, token) is missing."""
    kind = 'configuration_error'


class InvalidInput(BridgeError):
    """Raised before any network activity when the request is malformed."""
    kind = 'invalid_input'


class TransportError(BridgeError):
    """DNS failure, refused connection, timeout or TLS error."""
    kind = 'transport_error'


class HttpStatusError(BridgeError):
    """Raised when the response status code is outside [200, 300)."""
    kind = 'http_status_error'

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP error: {status_code} - Response: {body}")
        self.status_code = status_code
        self.body = body


class DecodeError(BridgeError):
    """Raised when a 2xx response body is not valid JSON."""
    kind = 'decode_error'

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


ERROR_KINDS = {
    cls.kind: cls
    for cls in (InvalidInput, TransportError, HttpStatusError, DecodeError)
}
