import threading
import time
from dataclasses import dataclass
from typing import Any

# Stored for tokens the backend rejected, so repeated bad cookies skip the round trip.
MISSING = object()


@dataclass
class CacheEntry:
	value: Any
	expires_at: float


class TTLCache:
	def __init__(self, max_items: int = 5000, clock=time.monotonic):
		self._max = max_items
		self._clock = clock
		self._lock = threading.RLock()
		self._data: dict[str, CacheEntry] = {}

	def __len__(self) -> int:
		with self._lock:
			return len(self._data)

	def get(self, key: str, default=None):
		now = self._clock()
		with self._lock:
			ent = self._data.get(key)
			if ent is None:
				return default
			if ent.expires_at <= now:
				self._data.pop(key, None)
				return default
			return ent.value

	def set(self, key: str, value, ttl_seconds: float) -> None:
		if ttl_seconds <= 0:
			self.delete(key)
			return
		now = self._clock()
		with self._lock:
			if key not in self._data and len(self._data) >= self._max:
				self._evict(now)
			self._data[key] = CacheEntry(value=value, expires_at=now + ttl_seconds)

	def _evict(self, now: float) -> None:
		expired = [k for k, ent in self._data.items() if ent.expires_at <= now]
		for k in expired:
			self._data.pop(k, None)
		if len(self._data) >= self._max:
			# Oldest insertion first.
			self._data.pop(next(iter(self._data)))

	def delete(self, key: str) -> None:
		with self._lock:
			self._data.pop(key, None)

	def clear(self) -> None:
		with self._lock:
			self._data.clear()


session_cache = TTLCache(max_items=10000)
