"""Key-value record store working against a local directory or the remote record service."""

from .api import get_input, get_value, open_key_value_store, set_value
from .errors import (
    ConfigurationError,
    EncodingError,
    KeyValueStoreError,
    ParameterError,
    ServiceError,
    ValueTypeError,
)
from .services import StoreResolver
from .storage import KeyValueStoreBackend, LocalKeyValueStore, RemoteKeyValueStore, UNSET

__all__ = [
    "get_input",
    "get_value",
    "open_key_value_store",
    "set_value",
    "ConfigurationError",
    "EncodingError",
    "KeyValueStoreError",
    "ParameterError",
    "ServiceError",
    "ValueTypeError",
    "StoreResolver",
    "KeyValueStoreBackend",
    "LocalKeyValueStore",
    "RemoteKeyValueStore",
    "UNSET",
]
