"""
lyricsync - resolve time-synced lyrics for the playing track and follow along.

Lyrics come from local .lrc files and remote catalogs (LRCLIB, NetEase),
tried in priority order with an in-memory LRU cache in front. `locate` maps
a playback position to the active line.

Basic usage:
    >>> manager = LyricsManager([LocalProvider("~/lyrics"), LrclibProvider()])
    >>> lyrics = await manager.get_lyrics(Track("Post Malone", "Circles"))
    >>> index = locate(lyrics, 42000)  # -1 before the first line
"""

__version__ = "0.1.0"
__url__ = "https://github.com/Ja4e/lyricsync"

from .cache import LyricsCache
from .config import ConfigManager
from .exceptions import ConfigError, LyricsError, ParseError, ProviderError
from .logger import LOGGER, configure_logging
from .manager import LyricsManager, create_manager
from .models import Found, LyricLine, Lyrics, NotFound, Track, TransientFailure, make_cache_key
from .parser import parse_lrc
from .providers import LocalProvider, LrclibProvider, NeteaseProvider, SyncedlyricsProvider
from .sync import BEFORE_FIRST_LINE, LineTracker, locate
from .watcher import LyricsWatcher

__all__ = [
	"BEFORE_FIRST_LINE", "LOGGER", "ConfigError", "ConfigManager", "Found", "LineTracker",
	"LocalProvider", "LrclibProvider", "LyricLine", "Lyrics", "LyricsCache",
	"LyricsError", "LyricsManager", "LyricsWatcher", "NeteaseProvider", "NotFound",
	"ParseError", "ProviderError", "SyncedlyricsProvider", "Track", "TransientFailure",
	"configure_logging", "create_manager", "locate", "make_cache_key", "parse_lrc"
]
