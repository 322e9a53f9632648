"""
Track-change handling for a render loop.

The loop calls update(track) whenever it polls the player, poll() to pick up
finished lookups, and current_index(position) every frame. Lookups run as
background tasks; a result that arrives after the track changed is dropped.
"""

import asyncio
import time

from .logger import LOGGER
from .sync import BEFORE_FIRST_LINE, LineTracker

DEFAULT_MESSAGES = {
	"start": "Searching for lyrics...",
	"done": "Loaded",
	"failed": "No lyrics found",
	"clear": ""
}


class LyricsWatcher:
	def __init__(self, manager, messages=None, retry_interval=30):
		self.manager = manager
		self.retry_interval = retry_interval
		self.messages = dict(DEFAULT_MESSAGES)
		self.messages.update(messages or {})

		self.track = None
		self.lyrics = None
		self.tracker = None
		self.status = None
		self._future = None
		self._future_key = None
		self._start_time = None
		self._finished_at = None

	@property
	def is_fetching(self):
		return self._future is not None and not self._future.done()

	def update(self, track):
		"""Start a lookup when the track identity changes. Returns True if it did."""
		if track is None:
			return False
		if self.track is not None and track.cache_key == self.track.cache_key:
			if self._should_retry():
				LOGGER.log_debug(f"Retrying lyric lookup for {track}")
				self._start()
				return True
			return False

		LOGGER.log_info(f"New track detected: {track}")
		self.track = track
		self.lyrics = None
		self.tracker = None
		self._start()
		return True

	def _should_retry(self):
		"""Earlier lookup ended without lyrics and without a cached answer (all sources failed transiently)"""
		if self.is_fetching or self.lyrics is not None or self._finished_at is None:
			return False
		if self.track.cache_key in self.manager.cache:
			return False
		return time.time() - self._finished_at >= self.retry_interval

	def refresh(self):
		"""Forget the cached result for the current track and look it up again"""
		if self.track is None:
			return
		self.manager.invalidate(self.track)
		self.lyrics = None
		self.tracker = None
		self._start()

	def _start(self):
		# Cancel any existing lyric fetching task
		self._cancel()
		self._finished_at = None
		self._set_status("start")
		self._future_key = self.track.cache_key
		self._future = asyncio.ensure_future(self.manager.get_lyrics(self.track))

	def _cancel(self):
		if self._future is not None and not self._future.done():
			self._future.cancel()
			LOGGER.log_debug("Previous lyric fetching task cancelled")
		self._future = None
		self._future_key = None

	def poll(self):
		"""Apply a finished lookup if it belongs to the current track"""
		future = self._future
		if future is None or not future.done():
			return self.lyrics

		key = self._future_key
		self._future = None
		self._future_key = None
		self._finished_at = time.time()

		if future.cancelled():
			return self.lyrics
		if self.track is None or key != self.track.cache_key:
			LOGGER.log_debug(f"Discarding late lyrics for previous track ({key})")
			return self.lyrics

		error = future.exception()
		if error is not None:
			LOGGER.log_error(f"{self.track} lyrics fetch error: {error!r}")
			self._set_status("failed")
			return self.lyrics

		self.lyrics = future.result()
		if self.lyrics:
			self.tracker = LineTracker(self.lyrics)
			self._set_status("done")
		else:
			self.tracker = None
			self._set_status("failed")
		return self.lyrics

	async def wait(self):
		"""Await the in-flight lookup (if any) and apply it"""
		if self._future is not None:
			await asyncio.wait([self._future])
		return self.poll()

	def current_index(self, position):
		if self.tracker is None:
			return BEFORE_FIRST_LINE
		return self.tracker.index(position)

	def _set_status(self, step):
		if step == "start":
			self._start_time = time.time()
		self.status = step

	def status_message(self):
		"""Status line text, with elapsed time while searching"""
		if not self.status:
			return None
		base_msg = self.messages.get(self.status, self.status)
		if self.status == "start" and self._start_time:
			return f"{base_msg} {time.time() - self._start_time:.1f}s"
		return base_msg

	def close(self):
		self._cancel()
		self._set_status("clear")
