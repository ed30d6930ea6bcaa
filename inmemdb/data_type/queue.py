from collections import deque
from typing import Dict, Iterable, Optional


class FifoQueue:

    def __init__(self, name):
        self.name = name
        self.elements = deque()

    def __len__(self) -> int:
        return len(self.elements)

    def append_right(self, elements: Iterable[str]) -> None:
        self.elements.extend(elements)

    def pop_left(self) -> str:
        return self.elements.popleft()


class QueueStore:
    """Per-key FIFO queues. Callers hold the key's lock."""

    def __init__(self):
        self._queues: Dict[str, FifoQueue] = {}

    def push(self, key: str, values: Iterable[str]) -> int:
        q = self._queues.get(key)
        if q is None:
            q = FifoQueue(key)
            self._queues[key] = q
        q.append_right(values)
        return len(q)

    def pop(self, key: str) -> Optional[str]:
        """Front element, or None if there is no queue or it is empty.

        A queue is removed from the map once its last element is popped.
        """
        q = self._queues.get(key)
        if q is None or not q:
            return None
        val = q.pop_left()
        if not q:
            del self._queues[key]
        return val

    def __contains__(self, key: str) -> bool:
        return key in self._queues
