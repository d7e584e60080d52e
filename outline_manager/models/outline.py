# outline_manager/models/outline.py
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccessKey(BaseModel):
    """
    An access key provisioned on an Outline server.

    A key is initialized once the server has issued its access URL; only
    initialized keys can be turned into a ConnectionSource.
    """
    id: str = Field(
        "",
        description="Server-assigned identifier, or one chosen by the caller for upserts."
    )
    name: str = Field(
        "",
        description="Display label of the key."
    )
    password: str = Field(
        "",
        description="Shadowsocks password."
    )
    port: int = Field(
        0,
        ge=0,
        le=65535,
        description="Transport port, 0 when not yet assigned."
    )
    method: str = Field(
        "",
        description="Shadowsocks cipher, e.g. chacha20-ietf-poly1305."
    )
    access_url: str = Field(
        "",
        alias="accessUrl",
        description="ss:// URL issued by the server."
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def is_initialized(self) -> bool:
        return bool(self.access_url)

    def connection_source(self) -> "ConnectionSource":
        """Decode this key's access URL. See decode_access_key."""
        from outline_manager.services.access_url import decode_access_key

        return decode_access_key(self)


class AccessKeyList(BaseModel):
    """Envelope returned by GET /access-keys/."""

    access_keys: List[AccessKey] = Field(..., alias="accessKeys")

    model_config = ConfigDict(populate_by_name=True)


class ConnectionSource(BaseModel):
    """
    Connection parameters a Shadowsocks client needs, in SIP008 field layout.
    """
    server: str = Field(
        ...,
        description="Hostname or IP address of the proxy."
    )
    server_port: int = Field(
        ...,
        ge=0,
        le=65535,
        description="Proxy port."
    )
    password: str
    method: str

    model_config = ConfigDict(frozen=True)


class DataLimit(BaseModel):
    """Byte quota applied to access keys."""

    bytes: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class ServerInfo(BaseModel):
    """Snapshot of the server configuration returned by GET /server."""

    name: str
    server_id: str = Field(..., alias="serverId")
    metrics_enabled: bool = Field(False, alias="metricsEnabled")
    created_timestamp_ms: int = Field(
        ...,
        alias="createdTimestampMs",
        description="Creation time in milliseconds since the epoch."
    )
    version: str
    access_key_data_limit: Optional[DataLimit] = Field(None, alias="accessKeyDataLimit")
    port_for_new_access_keys: Optional[int] = Field(
        None,
        alias="portForNewAccessKeys",
        ge=0,
        le=65535,
    )
    hostname_for_access_keys: Optional[str] = Field(None, alias="hostnameForAccessKeys")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class TransferMetrics(BaseModel):
    """Cumulative bytes transferred per access key id."""

    bytes_transferred_by_user_id: Dict[str, int] = Field(..., alias="bytesTransferredByUserId")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def bytes_for(self, key_id: str) -> int:
        return self.bytes_transferred_by_user_id.get(key_id, 0)
