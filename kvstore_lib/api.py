"""Convenience functions over the default key-value store.

These validate their arguments, resolve the store through a
`StoreResolver` and delegate. A resolver may be passed explicitly; when it
is omitted a process default resolver built from the environment is used.
"""
from __future__ import annotations
from typing import Any, Mapping, Optional
import asyncio
import logging

from kvstore_lib.config import load_config
from kvstore_lib.errors import ParameterError
from kvstore_lib.services.resolver import StoreResolver
from kvstore_lib.storage.base import KeyValueStoreBackend
from kvstore_lib.storage.filenames import validate_key
from kvstore_lib.storage.serializer import UNSET

logger = logging.getLogger(__name__)

# Module-level default resolver (built lazily from the environment) and the
# event loop it is bound to once used from async code
_default_resolver: Optional[StoreResolver] = None
_default_loop: Optional[asyncio.AbstractEventLoop] = None


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _loop_changed(loop: Optional[asyncio.AbstractEventLoop]) -> bool:
    return loop is not None and _default_loop is not None and loop is not _default_loop


def get_default_resolver() -> StoreResolver:
    """Return the process default resolver.

    The resolver holds an `asyncio.Lock` and an HTTP client that belong to
    one event loop. When called from a different running loop (for example
    a second `asyncio.run()`), a fresh resolver is built for that loop.
    """
    global _default_resolver, _default_loop
    loop = _running_loop()
    if _default_resolver is not None and _loop_changed(loop):
        # The old client belongs to a loop that can no longer run its cleanup.
        logger.debug("Event loop changed, rebuilding the default key-value store resolver")
        _default_resolver = None
    if _default_resolver is None:
        _default_resolver = StoreResolver(load_config())
    if loop is not None:
        _default_loop = loop
    return _default_resolver


async def reset_default_resolver() -> None:
    """Close and discard the default resolver; the next call rebuilds it."""
    global _default_resolver, _default_loop
    resolver, _default_resolver = _default_resolver, None
    stale = _loop_changed(_running_loop())
    _default_loop = None
    if resolver is not None and not stale:
        await resolver.close()


async def open_key_value_store(
    id_or_name: Optional[str] = None,
    *,
    force_cloud: bool = False,
    resolver: Optional[StoreResolver] = None,
) -> KeyValueStoreBackend:
    return await (resolver or get_default_resolver()).open(id_or_name, force_cloud=force_cloud)


async def get_value(key: str, *, resolver: Optional[StoreResolver] = None) -> Any:
    """Read `key` from the default store; None when the record does not exist."""
    validate_key(key)
    store = await open_key_value_store(resolver=resolver)
    return await store.get_value(key)


async def set_value(
    key: str,
    value: Any = UNSET,
    options: Optional[Mapping[str, Any]] = None,
    *,
    resolver: Optional[StoreResolver] = None,
) -> None:
    """Write `value` under `key` in the default store (None deletes the record).

    `options` may carry a `content_type`; the value must then be text or
    bytes and is stored verbatim.
    """
    validate_key(key)
    if options is not None and not isinstance(options, Mapping):
        raise ParameterError('Parameter "options" of type dict must be provided')
    content_type = (options or {}).get("content_type")
    store = await open_key_value_store(resolver=resolver)
    await store.set_value(key, value, content_type=content_type)


async def get_input(*, resolver: Optional[StoreResolver] = None) -> Any:
    """Read the run input record from the default store."""
    resolver = resolver or get_default_resolver()
    return await get_value(resolver.config.input_key, resolver=resolver)
