"""Pytest configuration and shared fixtures."""

import ssl
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from outline_manager.services.http_client import certificate_fingerprint, create_http_client
from outline_manager.services.outline_service import OutlineManagementClient

# Management API root as printed by the Outline installer
API_URL = "https://203.0.113.10:47353/Xk3pQzR8mTnw"

# base64("chacha20-ietf-poly1305:s3cr3tPassw0rd")
ACCESS_URL = "ss://Y2hhY2hhMjAtaWV0Zi1wb2x5MTMwNTpzM2NyM3RQYXNzdzByZA@203.0.113.10:11295/?outline=1"


class RecordingTransport:
    """Stub transport that records requests and answers from a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        response.request = request
        return response


@pytest.fixture
def http_client():
    """Real httpx client; routes are mocked per test with respx."""
    client = create_http_client()
    yield client
    client.close()


@pytest.fixture
def outline_client(http_client):
    """Management client bound to the mocked API root."""
    return OutlineManagementClient(api_url=API_URL, transport=http_client)


@pytest.fixture
def recording_transport():
    """Factory for stub transports answering with a fixed response."""

    def factory(status_code: int = 200, **kwargs) -> RecordingTransport:
        return RecordingTransport(lambda request: httpx.Response(status_code, **kwargs))

    return factory


@pytest.fixture
def mock_access_key_data():
    """Access key as returned by GET /access-keys/{id}."""
    return {
        "id": "1",
        "name": "alice",
        "password": "s3cr3tPassw0rd",
        "port": 11295,
        "method": "chacha20-ietf-poly1305",
        "accessUrl": ACCESS_URL,
    }


@pytest.fixture
def mock_access_keys_data(mock_access_key_data):
    """Envelope returned by GET /access-keys/."""
    return {
        "accessKeys": [
            mock_access_key_data,
            {
                "id": "2",
                "name": "bob",
                "password": "an0therOne",
                "port": 11295,
                "method": "chacha20-ietf-poly1305",
                "accessUrl": "ss://Y2hhY2hhMjAtaWV0Zi1wb2x5MTMwNTphbjB0aGVyT25l@203.0.113.10:11295/?outline=1",
                "dataLimit": {"bytes": 1000000},
            },
        ]
    }


@pytest.fixture
def mock_server_info_data():
    """Server info as returned by GET /server."""
    return {
        "name": "Outline Server Frankfurt",
        "serverId": "7fda0079-5317-4e5a-bb41-5a431dddae21",
        "metricsEnabled": True,
        "createdTimestampMs": 1700000000000,
        "version": "1.8.1",
        "accessKeyDataLimit": {"bytes": 8589934592},
        "portForNewAccessKeys": 11295,
        "hostnameForAccessKeys": "203.0.113.10",
    }


# Self-signed certificate for the local TLS server, like the ones Outline generates
TLS_CERT = Path(__file__).parent / "outline_test_cert.pem"
TLS_KEY = Path(__file__).parent / "outline_test_key.pem"


class _RecordingHandler(BaseHTTPRequestHandler):
    """Answers every request with 204 and remembers what it saw."""

    def _record(self):
        self.server.received.append((self.command, self.path))
        self.send_response(204)
        self.end_headers()

    do_GET = do_PUT = do_POST = do_DELETE = _record

    def log_message(self, format, *args):
        pass


@pytest.fixture
def tls_server():
    """Local HTTPS server with a self-signed certificate.

    Yields (api_url, fingerprint, received) where received lists the
    (method, path) pairs the server actually got.
    """
    server = ThreadingHTTPServer(("127.0.0.1", 0), _RecordingHandler)
    server.received = []
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(TLS_CERT, TLS_KEY)
    server.socket = context.wrap_socket(server.socket, server_side=True)

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    fingerprint = certificate_fingerprint(ssl.PEM_cert_to_DER_cert(TLS_CERT.read_text()))
    host, port = server.server_address[:2]
    yield f"https://{host}:{port}/SECRETPATH", fingerprint, server.received

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
