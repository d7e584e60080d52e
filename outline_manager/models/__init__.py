"""Data models for the Outline management API."""

from outline_manager.models.outline import (
    AccessKey,
    AccessKeyList,
    ConnectionSource,
    DataLimit,
    ServerInfo,
    TransferMetrics,
)

__all__ = [
    "AccessKey",
    "AccessKeyList",
    "ConnectionSource",
    "DataLimit",
    "ServerInfo",
    "TransferMetrics",
]
