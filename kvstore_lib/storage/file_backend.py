"""File-backed key-value store.

Each store is the directory `<local_storage_dir>/key_value_stores/<store_id>`
and each record one file in it named `<key>.<ext>`, the extension encoding
the content type. Writes are atomic: the payload goes to a temporary file
which is then renamed over the target.
"""
from __future__ import annotations
import asyncio
import logging
import os
import shutil
import uuid
from functools import partial
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, Tuple

from kvstore_lib.errors import ParameterError
from kvstore_lib.storage.base import DropCallback, KeyItem, KeyValueStoreBackend, validate_set_args
from kvstore_lib.storage.filenames import (
    content_type_for,
    filename_for,
    key_from_filename,
    matches_key,
    validate_key,
)
from kvstore_lib.storage.serializer import UNSET, decode_value, encode_value, to_bytes

logger = logging.getLogger(__name__)

LOCAL_STORAGE_SUBDIR = "key_value_stores"
TMP_SUFFIX = ".tmp"


def validate_store_id(store_id: Any) -> str:
    """Reject ids that cannot be used as a single directory name."""
    if not isinstance(store_id, str) or not store_id:
        raise ParameterError('Parameter "storeId" of type str must be a non-empty string')
    if store_id in (".", "..") or "/" in store_id or "\\" in store_id or "\x00" in store_id:
        raise ParameterError(f'The store id "{store_id}" must not be "." or ".." or contain path separators')
    return store_id


class LocalKeyValueStore(KeyValueStoreBackend):
    def __init__(
        self,
        store_id: str,
        local_storage_dir: str | Path,
        *,
        name: Optional[str] = None,
        on_drop: Optional[DropCallback] = None,
    ) -> None:
        validate_store_id(store_id)
        super().__init__(store_id, name=name, on_drop=on_drop)
        stores_root = (Path(local_storage_dir) / LOCAL_STORAGE_SUBDIR).resolve()
        self.local_storage_path = (stores_root / store_id).resolve()
        # Symlinks must not move the store directory out of the stores root.
        if self.local_storage_path.parent != stores_root:
            raise ParameterError(f'The store id "{store_id}" does not name a directory under {stores_root}')
        self.local_storage_path.mkdir(parents=True, exist_ok=True)

    async def _run(self, func: Callable, *args, **kwargs):
        """Run blocking filesystem work in the loop's default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    def _record_files(self, key: str) -> List[Path]:
        if not self.local_storage_path.exists():
            return []
        belongs = matches_key(key)
        return [p for p in self.local_storage_path.iterdir() if p.is_file() and belongs(p.name)]

    def _delete_sync(self, key: str) -> None:
        for path in self._record_files(key):
            path.unlink(missing_ok=True)
            logger.debug("Deleted record file %s", path)

    def _write_sync(self, key: str, filename: str, data: bytes) -> None:
        self.local_storage_path.mkdir(parents=True, exist_ok=True)
        path = self.local_storage_path / filename
        tmp = path.with_name(f"{filename}.{uuid.uuid4().hex}{TMP_SUFFIX}")
        try:
            with open(tmp, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        finally:
            tmp.unlink(missing_ok=True)
        # A previous value may have been written with another content type.
        for stale in self._record_files(key):
            if stale.name != filename:
                stale.unlink(missing_ok=True)

    def _read_sync(self, key: str) -> Optional[Tuple[bytes, str]]:
        files = self._record_files(key)
        if not files:
            return None
        path = files[0]
        try:
            return path.read_bytes(), content_type_for(path.name)
        except FileNotFoundError:
            # Removed by a concurrent writer between listing and reading.
            return None

    def _list_sync(self) -> List[Tuple[str, int]]:
        if not self.local_storage_path.exists():
            return []
        items = []
        for p in self.local_storage_path.iterdir():
            if not p.is_file() or p.name.endswith(TMP_SUFFIX):
                continue
            key = key_from_filename(p.name)
            if key:
                items.append((key, p.stat().st_size))
        items.sort(key=lambda item: item[0])
        return items

    def _drop_sync(self) -> None:
        if self.local_storage_path.exists():
            shutil.rmtree(self.local_storage_path)

    async def set_value(self, key: str, value: Any = UNSET, *, content_type: Optional[str] = None) -> None:
        validate_set_args(key, value, content_type)
        if value is None:
            await self._run(self._delete_sync, key)
            return
        payload, final_type = encode_value(value, content_type)
        filename = filename_for(key, final_type)
        await self._run(self._write_sync, key, filename, to_bytes(payload))
        logger.debug("Stored record %s/%s as %s", self.store_id, key, filename)

    async def get_value(self, key: str) -> Any:
        validate_key(key)
        found = await self._run(self._read_sync, key)
        if found is None:
            return None
        data, content_type = found
        return decode_value(data, content_type)

    async def iterate_keys(self, exclusive_start_key: Optional[str] = None) -> AsyncIterator[KeyItem]:
        items = await self._run(self._list_sync)
        if exclusive_start_key is not None:
            items = [item for item in items if item[0] > exclusive_start_key]
        for index, (key, size) in enumerate(items):
            yield key, index, {"size": size}

    async def _drop(self) -> None:
        await self._run(self._drop_sync)

    def get_public_url(self, key: str) -> str:
        return f"file://{self.local_storage_path}/{key}"
