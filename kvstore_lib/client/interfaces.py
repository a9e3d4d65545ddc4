from __future__ import annotations

from typing import Protocol, Optional, Union, runtime_checkable

from kvstore_lib.client.models import KeyListPage, Record, StoreInfo


@runtime_checkable
class RecordServiceProtocol(Protocol):
    """Operations the remote engine consumes from the record service.

    `get_store` and `get_record` return None when the service reports the
    resource as missing; every other failure is raised as `ServiceError`.
    Authentication is the implementation's concern.
    """

    async def get_store(self, store_id: str) -> Optional[StoreInfo]: ...

    async def get_or_create_store(self, name: str) -> StoreInfo: ...

    async def delete_store(self, store_id: str) -> None: ...

    async def put_record(self, store_id: str, key: str, body: Union[bytes, str], content_type: str) -> None: ...

    async def get_record(self, store_id: str, key: str) -> Optional[Record]: ...

    async def delete_record(self, store_id: str, key: str) -> None: ...

    async def list_keys(
        self,
        store_id: str,
        exclusive_start_key: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> KeyListPage: ...

    async def aclose(self) -> None: ...
