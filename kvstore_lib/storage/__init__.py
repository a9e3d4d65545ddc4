"""Key-value store engines and codecs."""

from .base import KeyValueStoreBackend
from .file_backend import LocalKeyValueStore, LOCAL_STORAGE_SUBDIR
from .interfaces import KeyValueStoreProtocol
from .remote_backend import RemoteKeyValueStore
from .serializer import UNSET, maybe_stringify

__all__ = [
    "KeyValueStoreBackend",
    "KeyValueStoreProtocol",
    "LocalKeyValueStore",
    "RemoteKeyValueStore",
    "LOCAL_STORAGE_SUBDIR",
    "UNSET",
    "maybe_stringify",
]
