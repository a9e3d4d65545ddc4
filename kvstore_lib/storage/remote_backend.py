"""Key-value store backed by the remote record service."""
from __future__ import annotations
import logging
from typing import Any, AsyncIterator, Optional

from kvstore_lib.client.interfaces import RecordServiceProtocol
from kvstore_lib.config import DEFAULT_API_BASE_URL
from kvstore_lib.storage.base import DropCallback, KeyItem, KeyValueStoreBackend, validate_set_args
from kvstore_lib.storage.filenames import validate_key
from kvstore_lib.storage.serializer import DEFAULT_CHARSET, UNSET, decode_value, encode_value, parse_content_type

logger = logging.getLogger(__name__)


def with_charset(content_type: str, charset: str = DEFAULT_CHARSET) -> str:
    """Append `; charset=<charset>` unless the content type already names one."""
    _, params = parse_content_type(content_type)
    if "charset" in params:
        return content_type
    return f"{content_type}; charset={charset}"


class RemoteKeyValueStore(KeyValueStoreBackend):
    def __init__(
        self,
        store_id: str,
        client: RecordServiceProtocol,
        *,
        name: Optional[str] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        on_drop: Optional[DropCallback] = None,
    ) -> None:
        super().__init__(store_id, name=name, on_drop=on_drop)
        self.client = client
        self.api_base_url = api_base_url.rstrip("/")

    async def set_value(self, key: str, value: Any = UNSET, *, content_type: Optional[str] = None) -> None:
        validate_set_args(key, value, content_type)
        if value is None:
            await self.client.delete_record(self.store_id, key)
            logger.debug("Deleted record %s/%s", self.store_id, key)
            return
        payload, final_type = encode_value(value, content_type)
        await self.client.put_record(self.store_id, key, payload, with_charset(final_type))

    async def get_value(self, key: str) -> Any:
        validate_key(key)
        record = await self.client.get_record(self.store_id, key)
        if record is None:
            return None
        return decode_value(record.body, record.content_type)

    async def iterate_keys(self, exclusive_start_key: Optional[str] = None) -> AsyncIterator[KeyItem]:
        index = 0
        cursor = exclusive_start_key
        while True:
            page = await self.client.list_keys(self.store_id, exclusive_start_key=cursor)
            for item in page.items:
                yield item.key, index, {"size": item.size}
                index += 1
            if not page.is_truncated or page.next_exclusive_start_key is None:
                break
            cursor = page.next_exclusive_start_key

    async def _drop(self) -> None:
        await self.client.delete_store(self.store_id)

    def get_public_url(self, key: str) -> str:
        return f"{self.api_base_url}/v2/key-value-stores/{self.store_id}/records/{key}"
