"""Cache backends and the namespaced instance cache built on top of them.

The factory only needs ``has``, ``get`` and ``set`` from a cache backend, so any
object providing them can be plugged in. :class:`ArrayCache` keeps everything in
a plain dict and is the default; :class:`MappingCache` adapts any mutable
mapping, such as the bounded ``cachetools`` caches built by
:func:`make_cache_backend`.
"""

from enum import Enum
from typing import Any, Iterable, MutableMapping, Optional, Protocol, runtime_checkable

import structlog
from cachetools import LRUCache, TTLCache
from pydantic import BaseModel, Field

__all__ = [
    "DEFAULT_KEY_PREFIX",
    "CacheBackend",
    "CacheType",
    "CacheConfig",
    "MappingCache",
    "ArrayCache",
    "InstanceCache",
    "make_cache_backend",
]

logger = structlog.get_logger(__name__)

DEFAULT_KEY_PREFIX = "framework.bean."


@runtime_checkable
class CacheBackend(Protocol):
    """The key/value store the instance cache writes through to."""

    def has(self, key: str) -> bool: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class CacheType(str, Enum):
    """Supported cache backends."""

    ARRAY = "array"
    LRU = "lru"
    TTL = "ttl"


class CacheConfig(BaseModel):
    """Cache backend configuration."""

    cache_type: CacheType = CacheType.ARRAY
    maxsize: int = Field(default=1024, gt=0)
    ttl: int = Field(default=3600, gt=0)


class MappingCache:
    """Adapt a mutable mapping to the :class:`CacheBackend` protocol."""

    def __init__(self, mapping: MutableMapping[str, Any]):
        self._mapping = mapping

    def has(self, key: str) -> bool:
        return key in self._mapping

    def get(self, key: str) -> Any:
        return self._mapping.get(key)

    def set(self, key: str, value: Any) -> None:
        self._mapping[key] = value

    def delete(self, key: str) -> None:
        self._mapping.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._mapping.keys())


class ArrayCache(MappingCache):
    """An unbounded in-memory cache that lives as long as the object itself."""

    def __init__(self):
        super().__init__({})


def make_cache_backend(config: CacheConfig) -> MappingCache:
    """Create the cache backend described by ``config``.

    Bounded backends may evict instances; an evicted component is rebuilt the next
    time it is requested.
    """
    if config.cache_type is CacheType.LRU:
        return MappingCache(LRUCache(maxsize=config.maxsize))
    if config.cache_type is CacheType.TTL:
        return MappingCache(TTLCache(maxsize=config.maxsize, ttl=config.ttl))
    return ArrayCache()


class InstanceCache:
    """
    A view of a cache backend holding component instances by name.

    Every name is stored under ``<prefix><name>`` so the backend can be shared with
    unrelated consumers.
    """

    def __init__(self, backend: Optional[CacheBackend] = None, prefix: str = DEFAULT_KEY_PREFIX):
        self._backend = backend if backend is not None else ArrayCache()
        self._prefix = prefix

    def key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    def has(self, name: str) -> bool:
        return self._backend.has(self.key(name))

    def get(self, name: str) -> Any:
        return self._backend.get(self.key(name))

    def set(self, name: str, value: Any):
        self._backend.set(self.key(name), value)

    def invalidate(self, name: str):
        """Forget the instance cached for ``name``, so the next request rebuilds it.

        Raises:
            TypeError: If the backend does not support deletion.
        """
        delete = getattr(self._backend, "delete", None)
        if delete is None:
            raise TypeError(f"{type(self._backend).__name__} does not support deleting entries")
        delete(self.key(name))

    def clear(self):
        """Forget every instance stored under this cache's prefix.

        Raises:
            TypeError: If the backend can neither enumerate nor delete its keys.
        """
        keys = getattr(self._backend, "keys", None)
        if keys is None:
            raise TypeError(f"{type(self._backend).__name__} does not support enumerating keys")
        delete = getattr(self._backend, "delete", None)
        if delete is None:
            raise TypeError(f"{type(self._backend).__name__} does not support deleting entries")
        removed = [key for key in keys() if key.startswith(self._prefix)]
        for key in removed:
            delete(key)
        logger.debug("instance_cache_cleared", prefix=self._prefix, removed=len(removed))
