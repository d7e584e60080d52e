# outline_manager/services/errors.py
"""Exceptions raised by the access URL codec and the management client."""

from typing import Optional, Union


class OutlineError(Exception):
    """Base exception for outline_manager errors."""

    pass


class OutlineAPIError(OutlineError):
    """Exception raised when a management API call fails."""

    pass


class TransportError(OutlineAPIError):
    """Network or TLS failure before a response was received."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class CertificateMismatch(TransportError):
    """Server certificate does not match the pinned SHA-256 fingerprint."""

    pass


class RequestTimeout(OutlineAPIError):
    """The request did not complete within the configured timeout."""

    pass


class UnexpectedStatus(OutlineAPIError):
    """Server answered with a status code outside the endpoint's contract."""

    def __init__(self, got: int, want: Union[int, str], endpoint: str):
        super().__init__(f"{endpoint}: unexpected status {got}, expected {want}")
        self.got = got
        self.want = want
        self.endpoint = endpoint


class DecodeError(OutlineAPIError):
    """Response body is not the expected JSON shape."""

    pass


class AccessURLError(OutlineError):
    """Exception raised when an access URL cannot be decoded."""

    pass


class InvalidKey(AccessURLError):
    pass


class MalformedURL(AccessURLError):
    pass


class EncodingError(AccessURLError):
    pass


class MalformedCredentials(AccessURLError):
    pass


class InvalidPort(AccessURLError):
    pass
