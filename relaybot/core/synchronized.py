"""A dictionary guarded by a single lock per instance.

Suitable for configuration and lookup tables shared between threads; every
read and write takes the same lock, so it is not meant for hot-path state.
"""

import threading
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class SynchronizedDict(Generic[K, V]):
    """Thread-safe mapping with atomic get-or-add and add-or-update."""

    def __init__(self, initial: dict[K, V] | None = None) -> None:
        self._data: dict[K, V] = dict(initial or {})
        self._lock = threading.Lock()

    def __getitem__(self, key: K) -> V:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: K, value: V) -> None:
        with self._lock:
            self._data[key] = value

    def __delitem__(self, key: K) -> None:
        with self._lock:
            del self._data[key]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __iter__(self) -> Iterator[K]:
        # Iterate over a snapshot so callers never hold the lock
        return iter(self.keys())

    def get(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            return self._data.get(key, default)

    def keys(self) -> list[K]:
        with self._lock:
            return list(self._data.keys())

    def values(self) -> list[V]:
        with self._lock:
            return list(self._data.values())

    def items(self) -> list[tuple[K, V]]:
        with self._lock:
            return list(self._data.items())

    def pop(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            return self._data.pop(key, default)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def get_or_add(self, key: K, factory: Callable[[K], V]) -> V:
        """Return the value for ``key``, creating it with ``factory`` if absent.

        The factory runs under the lock, so it is called at most once per key.
        """
        with self._lock:
            if key in self._data:
                return self._data[key]
            value = factory(key)
            self._data[key] = value
            return value

    def add_or_update(
        self,
        key: K,
        add_value: V,
        update: Callable[[K, V], V],
    ) -> V:
        """Insert ``add_value`` or replace the existing value with ``update(key, old)``.

        Returns:
            The value stored after the operation.
        """
        with self._lock:
            if key in self._data:
                value = update(key, self._data[key])
            else:
                value = add_value
            self._data[key] = value
            return value

    def try_add(self, key: K, value: V) -> bool:
        """Insert ``value`` only if ``key`` is absent. Returns True if inserted."""
        with self._lock:
            if key in self._data:
                return False
            self._data[key] = value
            return True

    def __repr__(self) -> str:
        with self._lock:
            return f"SynchronizedDict({self._data!r})"
