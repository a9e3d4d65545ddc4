"""Key-value store backend interface.

Defines the `KeyValueStoreBackend` abstract class implemented by the local
(filesystem) and remote (record service) engines. Both engines accept and
return the same values so callers never branch on the backend in use.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Tuple, Union
import inspect
import logging
import warnings

from kvstore_lib.errors import ParameterError
from kvstore_lib.storage.filenames import validate_key
from kvstore_lib.storage.serializer import UNSET

logger = logging.getLogger(__name__)

KeyInfo = Dict[str, int]
KeyItem = Tuple[str, int, KeyInfo]
Visitor = Callable[[str, int, KeyInfo], Union[None, Awaitable[None]]]
DropCallback = Callable[[str], None]


def validate_set_args(key: Any, value: Any, content_type: Any) -> None:
    """Check arguments shared by every `set_value` implementation."""
    validate_key(key)
    if content_type is not None and not isinstance(content_type, str):
        raise ParameterError('Parameter "options.contentType" of type str | None must be provided')
    if value is None:
        if content_type is not None:
            raise ParameterError('The "options.contentType" parameter must not be used when removing the record')
    elif content_type == "":
        raise ParameterError("Parameter options.contentType cannot be empty string.")


class KeyValueStoreBackend(ABC):
    """Abstract key-value store bound to one store identifier.

    `set_value(key, None)` deletes the record; `get_value` returns None for
    a missing record instead of raising.
    """

    def __init__(self, store_id: str, name: Optional[str] = None, on_drop: Optional[DropCallback] = None) -> None:
        self._store_id = store_id
        self.name = name
        self._on_drop = on_drop

    @property
    def store_id(self) -> str:
        return self._store_id

    @abstractmethod
    async def set_value(self, key: str, value: Any = UNSET, *, content_type: Optional[str] = None) -> None:
        """Store `value` under `key`, or delete the record when `value` is None."""

    @abstractmethod
    async def get_value(self, key: str) -> Any:
        """Return the decoded value stored under `key`, or None."""

    @abstractmethod
    def iterate_keys(self, exclusive_start_key: Optional[str] = None) -> AsyncIterator[KeyItem]:
        """Yield `(key, index, {"size": n})` for keys after `exclusive_start_key`."""

    @abstractmethod
    async def _drop(self) -> None:
        """Remove the store and all of its records."""

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """Return a URL for the record; performs no I/O."""

    async def for_each_key(self, visitor: Visitor, exclusive_start_key: Optional[str] = None) -> None:
        """Call `visitor(key, index, info)` for every key, one at a time.

        Coroutine visitors are awaited before the next key is produced.
        """
        async for key, index, info in self.iterate_keys(exclusive_start_key):
            result = visitor(key, index, info)
            if inspect.isawaitable(result):
                await result

    async def drop(self) -> None:
        await self._drop()
        logger.debug("Dropped key-value store %s", self._store_id)
        if self._on_drop is not None:
            self._on_drop(self._store_id)

    async def delete(self) -> None:
        """Deprecated alias of `drop()`."""
        warnings.warn("delete() is deprecated, use drop() instead", DeprecationWarning, stacklevel=2)
        await self.drop()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(store_id={self._store_id!r}, name={self.name!r})"
