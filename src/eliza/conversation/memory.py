"""
Deferred-reply memory.

A bounded FIFO of replies saved by Defer reassemblies and recalled when a
later input matches no keyword.
"""

from collections import deque
from typing import Deque, List, Optional

from eliza.config.constants import DEFAULT_MEMORY_CAPACITY


class MemoryQueue:
    """
    Bounded FIFO of deferred replies.

    Attributes:
        _capacity: Maximum entries kept
        _entries: Oldest entry on the left

    Example:
        >>> memory = MemoryQueue(capacity=2)
        >>> memory.push("a"); memory.push("b"); memory.push("c")
        >>> memory.pop()
        'b'
    """

    def __init__(self, capacity: int = DEFAULT_MEMORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Memory capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: Deque[str] = deque(maxlen=capacity)

    def push(self, reply: str) -> None:
        """Append a reply, dropping the oldest entry when full."""
        self._entries.append(reply)

    def pop(self) -> Optional[str]:
        """Remove and return the oldest reply, or None when empty."""
        return self._entries.popleft() if self._entries else None

    def snapshot(self) -> List[str]:
        """Current entries, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MemoryQueue(size={len(self)}, capacity={self._capacity})"
