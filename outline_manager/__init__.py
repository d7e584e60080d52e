"""Management client for Outline access-key servers."""

from outline_manager.models import (
    AccessKey,
    ConnectionSource,
    ServerInfo,
    TransferMetrics,
)
from outline_manager.services import (
    OutlineManagementClient,
    decode_access_key,
    decode_access_url,
)
from outline_manager.services.errors import (
    AccessURLError,
    CertificateMismatch,
    DecodeError,
    EncodingError,
    InvalidKey,
    InvalidPort,
    MalformedCredentials,
    MalformedURL,
    OutlineAPIError,
    OutlineError,
    RequestTimeout,
    TransportError,
    UnexpectedStatus,
)

__all__ = [
    "AccessKey",
    "AccessURLError",
    "CertificateMismatch",
    "ConnectionSource",
    "DecodeError",
    "EncodingError",
    "InvalidKey",
    "InvalidPort",
    "MalformedCredentials",
    "MalformedURL",
    "OutlineAPIError",
    "OutlineError",
    "OutlineManagementClient",
    "RequestTimeout",
    "ServerInfo",
    "TransferMetrics",
    "TransportError",
    "UnexpectedStatus",
    "decode_access_key",
    "decode_access_url",
]
