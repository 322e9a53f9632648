"""
Lyrics resolution: cache first, then providers in ascending priority.

Caching policy per outcome:
  Found             -> positive entry
  NotFound (any)    -> negative entry once every provider has been tried
  TransientFailure  -> nothing cached, so a later call retries the track
"""

import asyncio
from typing import Dict, Optional

from .cache import DEFAULT_CACHE_SIZE, LyricsCache
from .logger import LOGGER, configure_logging
from .models import Found, Lyrics, NotFound, TransientFailure
from .providers import build_providers


class LyricsManager:
	def __init__(self, providers, cache_size=DEFAULT_CACHE_SIZE, cache=None):
		# fixed once constructed; lower priority value is tried first
		self.providers = tuple(sorted(providers, key=lambda p: p.priority))
		self.cache = cache if cache is not None else LyricsCache(cache_size)
		self._inflight: Dict[str, asyncio.Task] = {}

	async def get_lyrics(self, track) -> Optional[Lyrics]:
		"""Return lyrics for the track, or None when no source has any."""
		key = track.cache_key
		entry = self.cache.get(key)
		if entry is not None:
			LOGGER.log_debug(f"Cache hit ({'positive' if entry.lyrics else 'negative'}) for {track}")
			return entry.lyrics

		# one resolution per key at a time; later callers share the running task
		task = self._inflight.get(key)
		if task is None:
			task = asyncio.ensure_future(self._resolve_uncached(track, key))
			self._inflight[key] = task
			task.add_done_callback(lambda _: self._inflight.pop(key, None))
		else:
			LOGGER.log_debug(f"Joining in-flight resolution for {track}")
		return await asyncio.shield(task)

	resolve = get_lyrics

	async def _resolve_uncached(self, track, key):
		LOGGER.log_info(f"Starting lyric search for: {track}")
		saw_not_found = False

		for provider in self.providers:
			try:
				outcome = await provider.resolve(track)
			except Exception as e:
				LOGGER.log_error(f"{provider.name} raised while resolving {track}: {e!r}")
				outcome = TransientFailure(repr(e))

			if isinstance(outcome, Found):
				self.cache.put(key, outcome.lyrics)
				LOGGER.log_info(f"Lyrics for {track} from {provider.name}")
				return outcome.lyrics
			if isinstance(outcome, NotFound):
				saw_not_found = True
				LOGGER.log_debug(f"{provider.name}: no lyrics for {track}")
			else:
				LOGGER.log_warn(f"{provider.name}: transient failure for {track}: {outcome.reason}")

		if saw_not_found:
			self.cache.put(key, None)
			LOGGER.log_info(f"No lyrics found from any source for {track}")
		else:
			LOGGER.log_warn(f"All sources failed transiently for {track}; not caching")
		return None

	def invalidate(self, track):
		self.cache.discard(track.cache_key)

	def clear(self):
		self.cache.clear()


def create_manager(config_manager, session=None):
	"""Build a LyricsManager from configuration, once at startup. Also points LOGGER at the configured log file."""
	configure_logging(config_manager)
	return LyricsManager(build_providers(config_manager, session=session), cache_size=config_manager.CACHE_SIZE)
