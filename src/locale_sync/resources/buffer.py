"""Per-namespace buffer of missing keys awaiting a flush."""

from collections.abc import Iterator, Mapping


class PendingKeyBuffer:
    """
    Mapping of namespace -> key -> fallback value, accumulated between flushes.

    Recording the same key twice keeps the most recent fallback.
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, str]] = {}

    def record(self, namespace: str, key: str, fallback: str) -> None:
        """Insert or overwrite a pending key."""
        self._entries.setdefault(namespace, {})[key] = fallback

    def namespaces(self) -> list[str]:
        """Namespaces with at least one pending key."""
        return list(self._entries)

    def snapshot(self, namespace: str) -> dict[str, str]:
        """Copy of the pending keys for one namespace."""
        return dict(self._entries.get(namespace, {}))

    def snapshot_all(self) -> dict[str, dict[str, str]]:
        """Copy of every namespace's pending keys."""
        return {ns: dict(keys) for ns, keys in self._entries.items()}

    def acknowledge(self, namespace: str, flushed: Mapping[str, str]) -> None:
        """
        Remove keys that were persisted by a flush.

        A key is only removed if its buffered value still equals the flushed
        one, so keys re-recorded while the flush was running stay pending.
        """
        entry = self._entries.get(namespace)
        if entry is None:
            return
        for key, value in flushed.items():
            if entry.get(key) == value:
                del entry[key]
        if not entry:
            del self._entries[namespace]

    def discard(self, namespace: str) -> None:
        """Drop every pending key of a namespace."""
        _ = self._entries.pop(namespace, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        """Total number of pending keys across all namespaces."""
        return sum(len(keys) for keys in self._entries.values())
