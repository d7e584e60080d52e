# outline_manager/services/outline_service.py
import logging
from typing import Any, List, Optional, Tuple, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from outline_manager.models.outline import (
    AccessKey,
    AccessKeyList,
    ServerInfo,
    TransferMetrics,
)
from outline_manager.services.errors import (
    DecodeError,
    OutlineError,
    RequestTimeout,
    TransportError,
    UnexpectedStatus,
)
from outline_manager.services.http_client import (
    Transport,
    close_http_client,
    create_http_client,
)
from outline_manager.settings import settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Endpoints that accept any non-error status
BELOW_400 = "<400"


class OutlineManagementClient:
    """
    Client for the Outline server management API.

    Every method performs a single synchronous request. Status codes are
    checked strictly against each endpoint's contract, so for example a
    DELETE answered with 200 instead of 204 is reported as a failure.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        cert_sha256: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[Transport] = None,
    ):
        api_url = settings.api_url if api_url is None else api_url
        if not api_url:
            raise ValueError("Outline API URL is required")
        self.api_url = api_url.rstrip("/")
        self.timeout = settings.http_timeout if timeout is None else timeout

        self._owns_transport = transport is None
        self._transport: Transport = transport or create_http_client(
            cert_sha256=cert_sha256, timeout=self.timeout
        )

    def __enter__(self) -> "OutlineManagementClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            close_http_client(self._transport)
            self._owns_transport = False

    # --- Access keys ---

    def list_keys(self) -> List[AccessKey]:
        """
        Fetch all access keys.

        Raises:
            UnexpectedStatus: If the server does not answer 200.
            DecodeError: If the body is not an accessKeys envelope.
        """
        response = self._send("GET", "/access-keys/", expected=200)
        keys = self._decode(response, AccessKeyList).access_keys
        logger.info(f"Retrieved {len(keys)} access keys")
        return keys

    def get_key(self, key_id: str) -> AccessKey:
        response = self._send("GET", f"/access-keys/{_segment(key_id)}", expected=200)
        return self._decode(response, AccessKey)

    def add_key(self, key: AccessKey) -> AccessKey:
        """
        Create an access key.

        A key with an id is upserted with PUT /access-keys/{id}; a key without
        one is created with POST /access-keys and gets a server-assigned id.
        Both must be answered with 201.

        Returns:
            A new AccessKey with the server's response laid over the input.
        """
        body = key.model_dump(by_alias=True, exclude_defaults=True, exclude={"access_url"})
        if key.id:
            response = self._send(
                "PUT", f"/access-keys/{_segment(key.id)}", expected=201, json=body
            )
        else:
            response = self._send("POST", "/access-keys", expected=201, json=body)

        echoed = self._decode(response, AccessKey)
        created = key.model_copy(update=echoed.model_dump(exclude_unset=True))
        logger.info(f"Access key '{created.id}' created")
        return created

    def delete_key(self, key: AccessKey) -> None:
        self.delete_key_by_id(key.id)

    def delete_key_by_id(self, key_id: str) -> None:
        self._send("DELETE", f"/access-keys/{_segment(key_id)}", expected=204)
        logger.info(f"Access key '{key_id}' deleted")

    def rename_key(self, key: AccessKey, name: str) -> None:
        """Rename a key on the server, then update the local copy."""
        self.rename_key_by_id(key.id, name)
        key.name = name

    def rename_key_by_id(self, key_id: str, name: str) -> None:
        self._send(
            "PUT",
            f"/access-keys/{_segment(key_id)}/name",
            expected=204,
            data={"name": name},
        )
        logger.info(f"Access key '{key_id}' renamed")

    def check_key(self, key_id: str) -> Tuple[bool, Optional[OutlineError]]:
        """
        Look up a key and report whether it exists.

        Returns:
            (True, None) for an initialized key, (False, None) for a key
            without access URL, and (False, error) when the lookup failed.
        """
        try:
            key = self.get_key(key_id)
        except OutlineError as e:
            return False, e
        return key.is_initialized, None

    def key_exists(self, key_id: str) -> bool:
        """True if the key exists and is initialized. Lookup errors count as absent."""
        exists, error = self.check_key(key_id)
        if error is not None:
            logger.debug(f"Access key '{key_id}' treated as absent: {error}")
        return exists

    def get_or_create_key(self, key_id: str) -> AccessKey:
        """
        Return the key with this id, creating it if needed.

        Not atomic: concurrent callers for the same id must serialize
        themselves, otherwise the second create fails with UnexpectedStatus.
        """
        if self.key_exists(key_id):
            return self.get_key(key_id)
        return self.add_key(AccessKey(id=key_id))

    # --- Server ---

    def get_transfer_metrics(self) -> TransferMetrics:
        response = self._send("GET", "/metrics/transfer", expected=BELOW_400)
        return self._decode(response, TransferMetrics)

    def get_server_info(self) -> ServerInfo:
        response = self._send("GET", "/server", expected=BELOW_400)
        return self._decode(response, ServerInfo)

    # --- Internals ---

    def _send(
        self,
        method: str,
        path: str,
        expected: Union[int, str],
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request and enforce the endpoint's status contract."""
        endpoint = f"{method} {path}"
        request = httpx.Request(
            method,
            f"{self.api_url}{path}",
            extensions={"timeout": httpx.Timeout(self.timeout).as_dict()},
            **kwargs,
        )

        try:
            response = self._transport.send(request)
        except httpx.TimeoutException as e:
            logger.error(f"Outline API timeout: {endpoint} after {self.timeout}s")
            raise RequestTimeout(f"{endpoint} timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.error(f"Outline API request error: {endpoint} - {str(e)}")
            raise TransportError(f"Failed to reach Outline API: {str(e)}", cause=e) from e

        status = response.status_code
        ok = status < 400 if expected == BELOW_400 else status == expected
        if not ok:
            logger.error(f"Outline API HTTP error: {endpoint} - {status}")
            raise UnexpectedStatus(got=status, want=expected, endpoint=endpoint)

        return response

    def _decode(self, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Failed to decode {model.__name__} response: {str(e)}")
            raise DecodeError(f"Unexpected {model.__name__} payload: {str(e)}") from e


def _segment(key_id: str) -> str:
    """Percent-encode a key id as a single path segment."""
    return quote(key_id, safe="")
