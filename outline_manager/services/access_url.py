# outline_manager/services/access_url.py
"""
Decoding of Outline access URLs into Shadowsocks connection parameters.

An access URL looks like::

    ss://<base64(method:password)>@host:port/?outline=1#name

The user-info segment may use the standard or the URL-safe base64 alphabet,
with or without padding.
"""

import base64
import binascii
import logging
import re
from typing import Tuple, Type
from urllib.parse import unquote, urlsplit

from outline_manager.models.outline import AccessKey, ConnectionSource
from outline_manager.services.errors import (
    AccessURLError,
    EncodingError,
    InvalidKey,
    InvalidPort,
    MalformedCredentials,
    MalformedURL,
)

logger = logging.getLogger(__name__)

MAX_PORT = 65535
_PORT_RE = re.compile(r"^[0-9]+$")


def decode_access_key(key: AccessKey) -> ConnectionSource:
    """
    Decode an access key's URL into a ConnectionSource.

    Raises:
        InvalidKey: If the key has no access URL yet.
        MalformedURL, EncodingError, MalformedCredentials, InvalidPort:
            See decode_access_url.
    """
    if not key.is_initialized:
        raise _rejected(InvalidKey, f"Access key '{key.id}' has no access URL")
    return decode_access_url(key.access_url)


def decode_access_url(access_url: str) -> ConnectionSource:
    """
    Parse an access URL into host, port, method and password.

    Args:
        access_url: URL issued by the server for an access key.

    Returns:
        ConnectionSource with the decoded parameters.

    Raises:
        InvalidKey: If the URL is empty.
        MalformedURL: If the URL has no scheme, authority or host.
        EncodingError: If the user-info segment is not valid base64/UTF-8.
        MalformedCredentials: If the payload is not exactly 'method:password'.
        InvalidPort: If the port is missing, non-numeric or out of range.
    """
    if not access_url:
        raise _rejected(InvalidKey, "Access URL is empty")

    try:
        parts = urlsplit(access_url)
    except ValueError as e:
        raise _rejected(MalformedURL, f"Invalid access URL: {str(e)}") from e

    if not parts.scheme or not parts.netloc:
        raise _rejected(MalformedURL, "Access URL must have a scheme and an authority")

    user_info, _, host_port = parts.netloc.rpartition("@")

    payload = _decode_user_info(user_info)

    # Payload order is method first, then password
    fields = payload.split(":")
    if len(fields) != 2:
        raise _rejected(
            MalformedCredentials,
            f"Expected 'method:password' in access URL, got {len(fields)} field(s)"
        )
    method, password = fields

    host, port = _split_host_port(host_port)

    return ConnectionSource(
        server=host,
        server_port=port,
        password=password,
        method=method,
    )


def _decode_user_info(user_info: str) -> str:
    """
    Base64-decode the user-info segment of an access URL.

    The segment comes from the authority, which urlsplit ends at the first
    '/', so it never carries a leading path separator.
    """
    encoded = unquote(user_info).strip()
    # Accept URL-safe alphabet and missing padding
    encoded = encoded.replace("-", "+").replace("_", "/")
    encoded += "=" * (-len(encoded) % 4)

    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise _rejected(EncodingError, f"Invalid base64 user info: {str(e)}") from e


def _split_host_port(host_port: str) -> Tuple[str, int]:
    """Split 'host:port' or '[v6]:port' into hostname and integer port."""
    if host_port.startswith("[") and host_port.endswith("]"):
        raise _rejected(InvalidPort, "Access URL has no port")

    host, sep, port_text = host_port.rpartition(":")
    if not sep:
        raise _rejected(InvalidPort, "Access URL has no port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not host:
        raise _rejected(MalformedURL, "Access URL has no host")

    if not _PORT_RE.match(port_text):
        raise _rejected(InvalidPort, f"Port '{port_text}' is not a number")
    port = int(port_text)
    if port > MAX_PORT:
        raise _rejected(InvalidPort, f"Port {port} is out of range")

    return host, port


def _rejected(error: Type[AccessURLError], message: str) -> AccessURLError:
    """Log a decoding failure and build the exception to raise."""
    logger.warning(f"Rejected access URL: {message}")
    return error(message)
