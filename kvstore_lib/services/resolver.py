"""Store resolution and the per-process engine cache.

`StoreResolver` decides per call whether a store is served from the local
filesystem or from the remote record service, builds the engine and caches
it per backend. Repeated (and concurrent) `open` calls for one identifier
and backend return the same engine instance.
"""
from __future__ import annotations
import asyncio
import logging
from functools import partial
from typing import Callable, Dict, Optional, Tuple

from kvstore_lib.client import RecordServiceClient, RecordServiceProtocol
from kvstore_lib.config import DEFAULT_LOCAL_STORE_ID, ENV_VARS, StorageConfig
from kvstore_lib.errors import ConfigurationError, ParameterError
from kvstore_lib.storage.base import KeyValueStoreBackend
from kvstore_lib.storage.file_backend import LocalKeyValueStore
from kvstore_lib.storage.remote_backend import RemoteKeyValueStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[StorageConfig], RecordServiceProtocol]
# (backend, identifier); one identifier may be open locally and remotely at once
CacheKey = Tuple[str, str]

LOCAL = "local"
REMOTE = "remote"


def _default_client_factory(config: StorageConfig) -> RecordServiceProtocol:
    assert config.token is not None
    return RecordServiceClient(config.token, base_url=config.api_base_url)


class StoreResolver:
    def __init__(
        self,
        config: StorageConfig,
        *,
        client: Optional[RecordServiceProtocol] = None,
        client_factory: ClientFactory = _default_client_factory,
    ) -> None:
        self.config = config
        self._client = client
        self._client_factory = client_factory
        self._owns_client = client is None
        self._stores: Dict[CacheKey, KeyValueStoreBackend] = {}
        self._lock = asyncio.Lock()

    @property
    def client(self) -> RecordServiceProtocol:
        """Return the record service client, creating it on first use."""
        if self._client is None:
            if not self.config.token:
                raise ConfigurationError(
                    f"The '{ENV_VARS.TOKEN}' environment variable is not defined, "
                    "it is required to use the remote key-value store"
                )
            self._client = self._client_factory(self.config)
        return self._client

    def is_cached(self, store_id: str, backend: Optional[str] = None) -> bool:
        return any(
            ident == store_id and (backend is None or kind == backend)
            for kind, ident in self._stores
        )

    def forget(self, store_id: str, backend: Optional[str] = None) -> None:
        """Drop cached engines for `store_id` so the next `open` builds a fresh one.

        With `backend` set only that backend's engine is evicted.
        """
        for cache_key, store in list(self._stores.items()):
            if backend is not None and cache_key[0] != backend:
                continue
            if cache_key[1] == store_id or store.store_id == store_id:
                del self._stores[cache_key]
                logger.debug("Evicted %s key-value store %s from cache", *cache_key)

    async def open(self, id_or_name: Optional[str] = None, *, force_cloud: bool = False) -> KeyValueStoreBackend:
        """Return the engine for `id_or_name`, or the default store if omitted.

        A local engine is used when a local storage directory is configured
        and `force_cloud` is false; otherwise a remote engine.
        """
        if id_or_name is not None and (not isinstance(id_or_name, str) or not id_or_name):
            raise ParameterError('Parameter "storeIdOrName" of type str | None must be a non-empty string')
        use_local = self.config.uses_local_storage and not force_cloud
        ident = id_or_name or self._default_store_id(use_local)
        cache_key = (LOCAL if use_local else REMOTE, ident)

        async with self._lock:
            store = self._stores.get(cache_key)
            if store is None:
                if use_local:
                    store = self._open_local(ident)
                else:
                    store = await self._open_remote(ident, is_default=id_or_name is None)
                self._stores[cache_key] = store
                logger.info("Opened %s", store)
            return store

    def _default_store_id(self, use_local: bool) -> str:
        if self.config.default_store_id:
            return self.config.default_store_id
        if use_local:
            return DEFAULT_LOCAL_STORE_ID
        raise ConfigurationError(f"The '{ENV_VARS.DEFAULT_KEY_VALUE_STORE_ID}' environment variable is not defined")

    def _open_local(self, store_id: str) -> KeyValueStoreBackend:
        assert self.config.local_storage_dir is not None
        return LocalKeyValueStore(
            store_id,
            self.config.local_storage_dir,
            on_drop=partial(self.forget, backend=LOCAL),
        )

    async def _open_remote(self, id_or_name: str, *, is_default: bool) -> KeyValueStoreBackend:
        client = self.client
        store_id, name = id_or_name, None
        if not is_default:
            info = await client.get_store(id_or_name)
            if info is None:
                info = await client.get_or_create_store(id_or_name)
            store_id, name = info.id, info.name
        return RemoteKeyValueStore(
            store_id,
            client,
            name=name,
            api_base_url=self.config.api_base_url,
            on_drop=partial(self.forget, backend=REMOTE),
        )

    async def close(self) -> None:
        """Forget all engines and release the HTTP client if this resolver created it."""
        async with self._lock:
            self._stores.clear()
            if self._client is not None and self._owns_client:
                await self._client.aclose()
                self._client = None
