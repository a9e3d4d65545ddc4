from typing import Protocol, Any, AsyncIterator, Optional, runtime_checkable

from kvstore_lib.storage.base import KeyItem, Visitor


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Key-value store protocol mirroring `kvstore_lib.storage.KeyValueStoreBackend`.

    Implementations should follow the semantics documented on the abstract
    base class in `kvstore_lib.storage.base` (None deletes, None for missing
    records, sequential key enumeration).
    """

    store_id: str

    async def set_value(self, key: str, value: Any = ..., *, content_type: Optional[str] = None) -> None: ...

    async def get_value(self, key: str) -> Any: ...

    def iterate_keys(self, exclusive_start_key: Optional[str] = None) -> AsyncIterator[KeyItem]: ...

    async def for_each_key(self, visitor: Visitor, exclusive_start_key: Optional[str] = None) -> None: ...

    async def drop(self) -> None: ...

    def get_public_url(self, key: str) -> str: ...
