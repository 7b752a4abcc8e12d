"""Explicit per-instance cache of per-file classifications."""

from types import MappingProxyType
from typing import Mapping, Optional

from buildplan.scanner.types import FrameworkInfo


class FrameworkCache:
    """Path -> FrameworkInfo, owned by one classifier or coordinator.

    Entries are never invalidated automatically; `clear()` is the only way
    to drop them. The first writer for a key wins: concurrent misses may
    classify the same file twice, but every caller sees the stored result.
    """

    def __init__(self) -> None:
        self._entries: dict[str, FrameworkInfo] = {}

    def get(self, key: str) -> Optional[FrameworkInfo]:
        return self._entries.get(key)

    def put(self, key: str, info: FrameworkInfo) -> FrameworkInfo:
        """Store info unless key is already present; return the stored value."""
        # setdefault keeps the first writer
        return self._entries.setdefault(key, info)

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> Mapping[str, FrameworkInfo]:
        """A read-only copy of the current entries."""
        return MappingProxyType(dict(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
