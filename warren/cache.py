from __future__ import annotations

import threading
import typing

K = typing.TypeVar("K")
V = typing.TypeVar("V")


class Cache(typing.Generic[K, V]):
    """
    Minimal key-value store used to memoize parsed gophermaps and selector
    classifications.

    Implementations must be safe to call from several threads at once. Values
    are always deterministic for a given key, so two threads racing to fill
    the same slot may both compute it and either result can be kept.
    """

    def get(self, key: K) -> typing.Optional[V]:
        raise NotImplementedError

    def set(self, key: K, value: V) -> None:
        raise NotImplementedError

    def __contains__(self, key: object) -> bool:
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError


class UnboundedCache(Cache[K, V]):
    """
    Dictionary backed cache that grows for the lifetime of the process.

    Nothing is ever evicted, restarting the server is the only way to pick up
    changes made to the files on disk.
    """

    def __init__(self) -> None:
        self._data: typing.Dict[K, V] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> typing.Optional[V]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: K, value: V) -> None:
        with self._lock:
            self._data[key] = value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
