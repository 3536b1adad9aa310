"""Recency tracking for LRU eviction.

A doubly linked list of keys (oldest at the head, most recent at the tail)
with a dict index from key to node, so touching a key, removing it and
popping the oldest one are all O(1).
"""

from collections.abc import Iterator


class _Node:
    __slots__ = ("key", "last_access", "prev", "next")

    def __init__(self, key: str | None, last_access: int = 0) -> None:
        self.key = key
        self.last_access = last_access
        self.prev: _Node = self
        self.next: _Node = self


class AccessOrder:
    """Keys ordered by last access, oldest first."""

    def __init__(self) -> None:
        self._root = _Node(None)  # sentinel: root.next is oldest, root.prev is newest
        self._index: dict[str, _Node] = {}

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[str]:
        node = self._root.next
        while node is not self._root:
            yield node.key  # type: ignore[misc]
            node = node.next

    def touch(self, key: str, timestamp: int) -> None:
        """Insert *key* or move it to the most-recent position."""
        node = self._index.get(key)
        if node is None:
            node = _Node(key, timestamp)
            self._index[key] = node
        else:
            self._unlink(node)
            node.last_access = timestamp
        self._append(node)

    def remove(self, key: str) -> bool:
        """Drop *key*. Returns True if it was tracked."""
        node = self._index.pop(key, None)
        if node is None:
            return False
        self._unlink(node)
        return True

    def oldest(self) -> str | None:
        if not self._index:
            return None
        return self._root.next.key

    def pop_oldest(self) -> str | None:
        """Remove and return the least recently used key, or None when empty."""
        key = self.oldest()
        if key is not None:
            self.remove(key)
        return key

    def last_access(self, key: str) -> int | None:
        node = self._index.get(key)
        return node.last_access if node is not None else None

    def clear(self) -> None:
        self._index.clear()
        self._root.prev = self._root.next = self._root

    def _append(self, node: _Node) -> None:
        last = self._root.prev
        node.prev = last
        node.next = self._root
        last.next = node
        self._root.prev = node

    @staticmethod
    def _unlink(node: _Node) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = node.next = node
