"""In-memory LRU cache of resolution results, shared between threads"""

import threading
from collections import OrderedDict
from typing import Optional

from .exceptions import ConfigError
from .models import CacheEntry, Lyrics

DEFAULT_CACHE_SIZE = 20


class LyricsCache:
	"""
	Bounded least-recently-used store keyed by cache key.

	Holds positive entries (lyrics) and negative ones (lyrics is None).
	Every operation takes the lock only for the dict access itself.
	"""

	def __init__(self, capacity: int = DEFAULT_CACHE_SIZE):
		if capacity < 1:
			raise ConfigError(f"Cache capacity must be at least 1, got {capacity}")
		self.capacity = capacity
		self._entries = OrderedDict()
		self._lock = threading.Lock()

	def get(self, key: str) -> Optional[CacheEntry]:
		"""Return the entry for key (promoting it), or None on a miss."""
		with self._lock:
			entry = self._entries.get(key)
			if entry is not None:
				self._entries.move_to_end(key)
			return entry

	def put(self, key: str, lyrics: Optional[Lyrics]) -> None:
		"""Insert or overwrite, evicting the least recently used entry on overflow."""
		with self._lock:
			self._entries[key] = CacheEntry(lyrics)
			self._entries.move_to_end(key)
			while len(self._entries) > self.capacity:
				self._entries.popitem(last=False)

	def discard(self, key: str) -> None:
		with self._lock:
			self._entries.pop(key, None)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	def keys(self):
		"""Keys from least to most recently used"""
		with self._lock:
			return list(self._entries)

	def __contains__(self, key):
		with self._lock:
			return key in self._entries

	def __len__(self):
		with self._lock:
			return len(self._entries)
