import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class Entry:
    value: str
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class KVStore:
    """Scalar entries with passive expiry. Callers hold the key's lock."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._data: Dict[str, Entry] = {}  # key -> Entry
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def make_entry(self, value: str, ttl: Optional[int] = None) -> Entry:
        expire = self.now() + ttl if ttl is not None else None
        return Entry(value, expire)

    def get_entry(self, key: str) -> Optional[Entry]:
        return self._data.get(key)

    def is_expired(self, key: str) -> bool:
        ent = self._data.get(key)
        return ent is not None and ent.is_expired(self.now())

    def exists(self, key: str) -> bool:
        """Present and not past its expiry."""
        ent = self._data.get(key)
        return ent is not None and not ent.is_expired(self.now())

    def put(self, key: str, entry: Entry) -> None:
        self._data[key] = entry

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
