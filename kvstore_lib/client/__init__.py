"""Remote record service client.

Exposes the httpx-based `RecordServiceClient`, the protocol the remote
engine consumes, and the pydantic response models.
"""
from .interfaces import RecordServiceProtocol
from .models import KeyListItem, KeyListPage, Record, StoreInfo
from .record_client import RecordServiceClient

__all__ = [
    "RecordServiceProtocol",
    "RecordServiceClient",
    "KeyListItem",
    "KeyListPage",
    "Record",
    "StoreInfo",
]
