"""Error types raised by the key-value store.

Every error raised by this package derives from `KeyValueStoreError`, so
callers can catch the whole family at once. Filesystem failures of the
local backend are not wrapped: they propagate as the builtin `OSError`.
"""
from __future__ import annotations
from typing import Optional


class KeyValueStoreError(Exception):
    """Base class for key-value store errors."""


class ParameterError(KeyValueStoreError, ValueError):
    """Invalid or missing argument (key, options, content type)."""


class ValueTypeError(ParameterError, TypeError):
    """Value of the wrong type for an explicitly set content type."""


class EncodingError(KeyValueStoreError, ValueError):
    """Value cannot be serialized to a meaningful payload."""


class ConfigurationError(KeyValueStoreError):
    """Required configuration is missing for the selected backend."""


class ServiceError(KeyValueStoreError):
    """The remote record service failed or returned an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
