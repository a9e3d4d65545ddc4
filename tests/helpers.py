from typing import Any, Dict, List, Optional, Union

from kvstore_lib.client.models import KeyListItem, KeyListPage, Record, StoreInfo
from kvstore_lib.errors import ServiceError


class FakeRecordClient:
    """In-memory stand-in for `RecordServiceClient`.

    Records every call in `calls` so tests can assert on what would have
    gone over the wire. `page_size` controls how many keys `list_keys`
    returns per page.
    """

    def __init__(self, page_size: int = 1000) -> None:
        self.stores: Dict[str, Dict[str, Record]] = {}
        self.names: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.page_size = page_size
        self.closed = False

    def _store(self, store_id: str) -> Dict[str, Record]:
        return self.stores.setdefault(store_id, {})

    async def get_store(self, store_id: str) -> Optional[StoreInfo]:
        self.calls.append(('get_store', store_id))
        if store_id not in self.stores:
            return None
        return StoreInfo(id=store_id, name=self.names.get(store_id))

    async def get_or_create_store(self, name: str) -> StoreInfo:
        self.calls.append(('get_or_create_store', name))
        for sid, n in self.names.items():
            if n == name:
                return StoreInfo(id=sid, name=n)
        sid = f"id-{name}"
        self.names[sid] = name
        self._store(sid)
        return StoreInfo(id=sid, name=name)

    async def delete_store(self, store_id: str) -> None:
        self.calls.append(('delete_store', store_id))
        if store_id not in self.stores:
            raise ServiceError("Key-value store was not found", status_code=404)
        del self.stores[store_id]

    async def put_record(self, store_id: str, key: str, body: Union[bytes, str], content_type: str) -> None:
        self.calls.append(('put_record', store_id, key, body, content_type))
        self._store(store_id)[key] = Record(body=body, content_type=content_type)

    async def get_record(self, store_id: str, key: str) -> Optional[Record]:
        self.calls.append(('get_record', store_id, key))
        return self.stores.get(store_id, {}).get(key)

    async def delete_record(self, store_id: str, key: str) -> None:
        self.calls.append(('delete_record', store_id, key))
        self.stores.get(store_id, {}).pop(key, None)

    async def list_keys(self, store_id: str, exclusive_start_key: Optional[str] = None, limit: Optional[int] = None) -> KeyListPage:
        self.calls.append(('list_keys', store_id, exclusive_start_key))
        records = self.stores.get(store_id, {})
        keys = sorted(k for k in records if exclusive_start_key is None or k > exclusive_start_key)
        page = keys[: limit or self.page_size]
        truncated = len(page) < len(keys)
        items = [KeyListItem(key=k, size=_size(records[k].body)) for k in page]
        return KeyListPage(
            items=items,
            is_truncated=truncated,
            exclusive_start_key=exclusive_start_key,
            next_exclusive_start_key=page[-1] if truncated else None,
        )

    async def aclose(self) -> None:
        self.closed = True


def _size(body: Any) -> int:
    if isinstance(body, str):
        return len(body.encode('utf-8'))
    return len(body)
