"""
Lyric sources.

Every provider answers resolve(track) with Found, NotFound or
TransientFailure. Only NotFound means the source positively has nothing.
"""

import asyncio
import os
import re

import aiohttp
import syncedlyrics

from . import __url__, __version__
from .exceptions import ProviderError
from .logger import LOGGER
from .models import Found, NotFound, TransientFailure
from .parser import parse_lrc

DEFAULT_TIMEOUT = 10
CLIENT_ID = f"lyricsync v{__version__} ({__url__})"

LRCLIB_URL = "https://lrclib.net/api/get"
NETEASE_SEARCH_URL = "https://music.163.com/api/search/get"
NETEASE_LYRIC_URL = "https://music.163.com/api/song/lyric"


def sanitize_filename(name):
	"""Make strings safe for filenames"""
	return re.sub(r'[<>:"/\\|?*]', '_', name)


class LyricsProvider:
	"""Base class: subclasses set `name`/`default_priority` and implement resolve()"""

	name = "provider"
	default_priority = 100

	def __init__(self, priority=None):
		self.priority = self.default_priority if priority is None else int(priority)

	async def resolve(self, track):
		raise NotImplementedError

	def _finish(self, content, track):
		"""Parse raw LRC text into an outcome; text without timed lines counts as not found"""
		lyrics = parse_lrc(content)
		if not lyrics:
			LOGGER.log_debug(f"{self.name}: content for {track} has no timed lines")
			return NotFound()
		LOGGER.log_info(f"{self.name}: found {len(lyrics)} lines for {track}")
		return Found(lyrics.with_defaults(title=track.name, artist=track.artist, source=self.name))

	def __repr__(self):
		return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"


# ================
#  LOCAL FILES
# ================
class LocalProvider(LyricsProvider):
	"""Looks for '<Artist> - <Title>.lrc' or '<Title> - <Artist>.lrc' in a directory"""

	name = "local"
	default_priority = 0

	def __init__(self, directory, extension="lrc", priority=None):
		super().__init__(priority)
		self.directory = directory
		self.extension = extension.lstrip(".")

	def candidate_names(self, track):
		names = []
		for artist, title in ((track.artist, track.name), (sanitize_filename(track.artist), sanitize_filename(track.name))):
			for stem in (f"{artist} - {title}", f"{title} - {artist}"):
				name = f"{stem}.{self.extension}".lower()
				if name not in names:
					names.append(name)
		return names

	def find_file(self, track):
		"""Blocking: return the matching path or None"""
		if not self.directory or not os.path.isdir(self.directory):
			return None
		try:
			entries = {entry.lower(): entry for entry in os.listdir(self.directory)}
		except OSError as e:
			LOGGER.log_debug(f"Cannot list {self.directory}: {e}")
			return None
		for candidate in self.candidate_names(track):
			if candidate in entries:
				path = os.path.join(self.directory, entries[candidate])
				if os.path.isfile(path):
					return path
		return None

	@staticmethod
	def read_file(file_path):
		with open(file_path, "r", encoding="utf-8-sig") as f:
			return f.read()

	async def resolve(self, track):
		loop = asyncio.get_running_loop()
		file_path = await loop.run_in_executor(None, self.find_file, track)
		if file_path is None:
			return NotFound()

		try:
			content = await loop.run_in_executor(None, self.read_file, file_path)
		except (OSError, UnicodeDecodeError) as e:
			LOGGER.log_warn(f"File read error: {file_path} - {e}")
			return TransientFailure(f"unreadable file {file_path}: {e}")

		LOGGER.log_debug(f"Using local lyrics file: {file_path}")
		return self._finish(content, track)


# ================
#  REMOTE CATALOGS
# ================
class RemoteProvider(LyricsProvider):
	"""
	Shared plumbing for HTTP providers.

	A session may be injected and is then left open; otherwise one is opened
	and closed around each resolution. Each request gets its own timeout.
	"""

	headers = {"User-Agent": CLIENT_ID}

	def __init__(self, session=None, timeout=DEFAULT_TIMEOUT, priority=None):
		super().__init__(priority)
		self.session = session
		self.timeout = timeout

	async def resolve(self, track):
		# Create a new session only if one isn't passed
		own_session = self.session is None
		session = aiohttp.ClientSession() if own_session else self.session
		try:
			return await self.fetch(session, track)
		except ProviderError as e:
			LOGGER.log_warn(f"Transient failure: {e}")
			return TransientFailure(e.message)
		finally:
			if own_session:
				await session.close()

	async def fetch(self, session, track):
		raise NotImplementedError

	async def get_json(self, session, url, params, not_found_statuses=()):
		"""GET url and decode JSON. Returns None for a status in not_found_statuses."""
		try:
			async with session.get(url, params=params, headers=self.headers, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
				if response.status in not_found_statuses:
					return None
				if response.status != 200:
					raise ProviderError(self.name, f"HTTP {response.status} from {url}")
				try:
					data = await response.json(content_type=None)
				except ValueError as e:
					content = await response.text()
					LOGGER.log_debug(f"{self.name}: invalid JSON. Raw response: {content[:200]}")
					raise ProviderError(self.name, f"invalid JSON from {url}: {e}") from e
		except asyncio.TimeoutError as e:
			raise ProviderError(self.name, f"timed out after {self.timeout}s requesting {url}") from e
		except aiohttp.ClientError as e:
			raise ProviderError(self.name, f"request to {url} failed: {e}") from e

		if not isinstance(data, dict):
			raise ProviderError(self.name, f"unexpected response shape from {url}")
		return data


class LrclibProvider(RemoteProvider):
	"""LRCLIB: a single lookup by exact artist and track name"""

	name = "lrclib"
	default_priority = 5
	headers = {"User-Agent": CLIENT_ID, "Lrclib-Client": CLIENT_ID}

	async def fetch(self, session, track):
		LOGGER.log_debug(f"Querying LRCLIB API: {track}")
		params = {"artist_name": track.artist, "track_name": track.name}
		data = await self.get_json(session, LRCLIB_URL, params, not_found_statuses=(404,))
		if data is None:
			return NotFound()

		synced = data.get("syncedLyrics")
		if not synced:
			if data.get("plainLyrics"):
				LOGGER.log_debug("LRCLIB returned plain lyrics only, cannot synchronize")
			return NotFound()
		return self._finish(synced, track)


class NeteaseProvider(RemoteProvider):
	"""NetEase Cloud Music: search for the song id, then fetch its lyric"""

	name = "netease"
	default_priority = 10
	headers = {"User-Agent": CLIENT_ID, "Referer": "https://music.163.com/"}

	async def fetch(self, session, track):
		search_term = f"{track.name} {track.artist}".strip()
		LOGGER.log_debug(f"Searching NetEase: {search_term}")
		params = {"s": search_term, "type": 1, "limit": 1, "offset": 0}
		data = await self.get_json(session, NETEASE_SEARCH_URL, params)
		self._check_code(data, "search")

		song_id = self._first_song_id(data)
		if song_id is None:
			return NotFound()

		params = {"id": song_id, "lv": -1, "kv": -1, "tv": -1}
		data = await self.get_json(session, NETEASE_LYRIC_URL, params)
		self._check_code(data, "lyric")
		lrc = data.get("lrc")
		if lrc is not None and not isinstance(lrc, dict):
			raise ProviderError(self.name, "unexpected lyric payload")
		lyric = (lrc or {}).get("lyric")
		if not lyric:
			return NotFound()
		return self._finish(lyric, track)

	def _check_code(self, data, endpoint):
		# the API answers HTTP 200 with an error code in the body when it throttles
		code = data.get("code")
		if code is not None and code != 200:
			message = data.get("message") or data.get("msg") or ""
			raise ProviderError(self.name, f"{endpoint} returned code {code} {message}".rstrip())

	def _first_song_id(self, data):
		result = data.get("result") or {}
		if not isinstance(result, dict):
			raise ProviderError(self.name, "unexpected search payload")
		songs = result.get("songs") or []
		if not songs:
			return None
		try:
			return int(songs[0]["id"])
		except (KeyError, TypeError, ValueError) as e:
			raise ProviderError(self.name, f"search result without a usable id: {e}") from e


# ================
#  SYNCEDLYRICS
# ================
class SyncedlyricsProvider(LyricsProvider):
	"""Delegates to the syncedlyrics library, run in a worker thread"""

	name = "syncedlyrics"
	default_priority = 20

	def __init__(self, providers=None, priority=None):
		super().__init__(priority)
		self.providers = providers

	def search(self, search_term):
		if self.providers:
			return syncedlyrics.search(search_term, synced_only=True, providers=self.providers)
		return syncedlyrics.search(search_term, synced_only=True)

	async def resolve(self, track):
		search_term = f"{track.name} {track.artist}".strip()
		if not search_term:
			return NotFound()

		# Run in thread to avoid blocking
		loop = asyncio.get_running_loop()
		try:
			lyrics = await loop.run_in_executor(None, self.search, search_term)
		except Exception as e:
			LOGGER.log_warn(f"syncedlyrics search error: {e}")
			return TransientFailure(f"syncedlyrics: {e}")

		if not lyrics:
			return NotFound()
		return self._finish(lyrics, track)


def build_providers(config_manager, session=None):
	"""Instantiate the configured sources in priority order"""
	factories = {
		"local": lambda priority: LocalProvider(config_manager.LOCAL_DIR, config_manager.LOCAL_EXTENSION, priority=priority),
		"lrclib": lambda priority: LrclibProvider(session=session, timeout=config_manager.SEARCH_TIMEOUT, priority=priority),
		"netease": lambda priority: NeteaseProvider(session=session, timeout=config_manager.SEARCH_TIMEOUT, priority=priority),
		"syncedlyrics": lambda priority: SyncedlyricsProvider(priority=priority)
	}
	providers = [factories[name](config_manager.PRIORITIES[name]) for name in config_manager.SOURCES]
	return sorted(providers, key=lambda p: p.priority)
