"""Outline management services."""

from outline_manager.services.access_url import decode_access_key, decode_access_url
from outline_manager.services.http_client import Transport, create_http_client
from outline_manager.services.outline_service import OutlineManagementClient

__all__ = [
    "OutlineManagementClient",
    "Transport",
    "create_http_client",
    "decode_access_key",
    "decode_access_url",
]
