from collections.abc import Hashable
from typing import Any


class _Sentinel:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


MISS = _Sentinel("MISS")
ABSENT = _Sentinel("ABSENT")


class ResultCache:
    """Process-scoped store for loaded documents and segment maps.

    No expiry and no size bound: the data tree does not change while the
    process runs. Entries are replaced wholesale, never mutated. ``ABSENT``
    records a confirmed missing document.

    ``enabled=False`` turns off document caching only; segment maps are
    always kept until ``clear()``.
    """

    def __init__(self, enabled: bool = True):
        self._store: dict[Hashable, Any] = {}
        self._mappings: dict[tuple[str, ...], dict[str, str]] = {}
        self.enabled = enabled

    def get(self, key: Hashable) -> Any:
        if not self.enabled:
            return MISS
        return self._store.get(key, MISS)

    def set(self, key: Hashable, value: Any) -> None:
        if self.enabled:
            self._store[key] = value

    def get_mapping(self, scope: tuple[str, ...]) -> dict[str, str] | None:
        return self._mappings.get(scope)

    def set_mapping(self, scope: tuple[str, ...], mapping: dict[str, str]) -> None:
        self._mappings[scope] = mapping

    def clear(self) -> None:
        self._store.clear()
        self._mappings.clear()

    def __len__(self) -> int:
        return len(self._store) + len(self._mappings)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store
