# outline_manager/services/http_client.py
"""HTTP transport interface and httpx client construction."""

import hashlib
import logging
import secrets
import ssl
from typing import Optional, Protocol

import httpcore
import httpx

from outline_manager.services.errors import CertificateMismatch
from outline_manager.settings import settings

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can send a prepared request. httpx.Client qualifies."""

    def send(self, request: httpx.Request) -> httpx.Response:
        ...


def certificate_fingerprint(der_bytes: bytes) -> str:
    """Upper-case hex SHA-256 digest of a DER-encoded certificate."""
    return hashlib.sha256(der_bytes).hexdigest().upper()


def normalize_fingerprint(value: str) -> str:
    return value.replace(":", "").strip().upper()


class PinnedNetworkStream(httpcore.NetworkStream):
    """TCP stream that checks the peer certificate as soon as TLS is up."""

    def __init__(self, stream: httpcore.NetworkStream, expected: str):
        self._stream = stream
        self._expected = expected

    def read(self, max_bytes: int, timeout: Optional[float] = None) -> bytes:
        return self._stream.read(max_bytes, timeout=timeout)

    def write(self, buffer: bytes, timeout: Optional[float] = None) -> None:
        self._stream.write(buffer, timeout=timeout)

    def close(self) -> None:
        self._stream.close()

    def get_extra_info(self, info: str):
        return self._stream.get_extra_info(info)

    def start_tls(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> httpcore.NetworkStream:
        tls_stream = self._stream.start_tls(
            ssl_context, server_hostname=server_hostname, timeout=timeout
        )
        try:
            self._verify(tls_stream, server_hostname)
        except CertificateMismatch:
            tls_stream.close()
            raise
        return tls_stream

    def _verify(self, tls_stream: httpcore.NetworkStream, server_hostname: Optional[str]) -> None:
        ssl_object = tls_stream.get_extra_info("ssl_object")
        if ssl_object is None:
            raise CertificateMismatch("Unable to inspect the server certificate")

        # The sync backend hands out the internal _ssl socket, which only
        # accepts binary_form positionally.
        der_bytes = ssl_object.getpeercert(True)
        if not der_bytes:
            raise CertificateMismatch("Server presented no certificate")

        actual = certificate_fingerprint(der_bytes)
        if not secrets.compare_digest(actual, self._expected):
            logger.error(f"Certificate fingerprint mismatch for {server_hostname}: {actual}")
            raise CertificateMismatch(
                f"Server certificate fingerprint {actual} does not match the pinned one"
            )


class PinnedNetworkBackend(httpcore.NetworkBackend):
    """
    Network backend that pins the server certificate by SHA-256 fingerprint.

    The check runs right after the TLS handshake, so on a mismatch the
    connection is closed before any request bytes are written.
    """

    def __init__(self, expected: str, backend: Optional[httpcore.NetworkBackend] = None):
        self.expected = normalize_fingerprint(expected)
        self._backend = backend or httpcore.SyncBackend()

    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        local_address: Optional[str] = None,
        socket_options=None,
    ) -> httpcore.NetworkStream:
        stream = self._backend.connect_tcp(
            host,
            port,
            timeout=timeout,
            local_address=local_address,
            socket_options=socket_options,
        )
        return PinnedNetworkStream(stream, self.expected)

    def connect_unix_socket(
        self,
        path: str,
        timeout: Optional[float] = None,
        socket_options=None,
    ) -> httpcore.NetworkStream:
        stream = self._backend.connect_unix_socket(
            path, timeout=timeout, socket_options=socket_options
        )
        return PinnedNetworkStream(stream, self.expected)

    def sleep(self, seconds: float) -> None:
        self._backend.sleep(seconds)


class PinnedHTTPTransport(httpx.HTTPTransport):
    """httpx transport whose connections go through PinnedNetworkBackend."""

    def __init__(self, cert_sha256: str, **kwargs):
        # CA validation is replaced by the pin; Outline certificates are self-signed
        super().__init__(verify=False, **kwargs)
        # httpx offers no public hook for the httpcore network backend
        self._pool._network_backend = PinnedNetworkBackend(cert_sha256)


def create_http_client(
    cert_sha256: Optional[str] = None,
    verify: Optional[bool] = None,
    timeout: Optional[float] = None,
) -> httpx.Client:
    """
    Create an HTTP client for the management API.

    With a fingerprint, CA validation is replaced by pinning since Outline
    servers use self-signed certificates. Without one, certificates are
    verified unless verification is explicitly disabled.
    """
    cert_sha256 = cert_sha256 if cert_sha256 is not None else settings.cert_sha256
    verify = settings.verify_tls if verify is None else verify
    timeout = settings.http_timeout if timeout is None else timeout

    limits = httpx.Limits(
        max_connections=settings.http_max_connections,
        max_keepalive_connections=settings.http_max_keepalive_connections,
        keepalive_expiry=30.0,
    )

    transport = None
    if cert_sha256:
        transport = PinnedHTTPTransport(cert_sha256, limits=limits)
        logger.info("Server certificate pinned by SHA-256 fingerprint")
    elif not verify:
        logger.warning("TLS certificate verification disabled and no fingerprint pinned")

    client = httpx.Client(
        timeout=httpx.Timeout(timeout),
        limits=limits,
        verify=verify,
        transport=transport,
        # Environment proxies would be mounted without the pinned transport
        trust_env=transport is None,
        follow_redirects=False,
        headers={
            "User-Agent": f"{settings.app_name}/{settings.app_version}",
            "Accept": "application/json",
        },
    )
    logger.debug("HTTP client initialized")
    return client


def close_http_client(client: Optional[httpx.Client]) -> None:
    """Close the HTTP client and release resources."""
    if client is not None:
        client.close()
        logger.debug("HTTP client closed")
