"""
Value types shared by the parser, providers, resolver and sync index.

All times are integer milliseconds.
"""

from dataclasses import dataclass, field, replace
from functools import cached_property
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

CACHE_KEY_SEPARATOR = "||"


def make_cache_key(artist, name):
	"""Normalize a track identity so equivalent tracks share one cache slot"""
	return f"{(artist or '').strip().lower()}{CACHE_KEY_SEPARATOR}{(name or '').strip().lower()}"


@dataclass(frozen=True)
class Track:
	"""Track as reported by the media player"""

	artist: str
	name: str
	album: Optional[str] = None
	duration: int = 0
	position: int = 0

	@property
	def cache_key(self) -> str:
		return make_cache_key(self.artist, self.name)

	def __str__(self):
		return f"{self.artist or 'Unknown'} - {self.name or 'Unknown'}"


@dataclass(frozen=True)
class LyricLine:
	timestamp: int
	text: str


@dataclass(frozen=True)
class Lyrics:
	"""
	Parsed, time-synchronized lyrics.

	`lines` is sorted by timestamp with ties kept in parse order, and
	`offset` has already been applied to every timestamp.
	"""

	lines: Tuple[LyricLine, ...] = ()
	title: Optional[str] = None
	artist: Optional[str] = None
	offset: int = 0
	metadata: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), compare=False)
	source: Optional[str] = None

	def __post_init__(self):
		if not isinstance(self.metadata, MappingProxyType):
			object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

	def __len__(self):
		return len(self.lines)

	def __bool__(self):
		return bool(self.lines)

	@cached_property
	def timestamps(self) -> Tuple[int, ...]:
		# computed once; lines never change
		return tuple(line.timestamp for line in self.lines)

	def with_defaults(self, title=None, artist=None, source=None) -> "Lyrics":
		"""Fill in missing title/artist (tags win over the caller's values)"""
		return replace(
			self,
			title=self.title or title,
			artist=self.artist or artist,
			source=source or self.source,
		)

	def to_lrc_string(self) -> str:
		"""Render back to LRC text. The offset is already baked in, so no [offset] tag."""
		result = ""
		if self.title:
			result += f"[ti:{self.title}]\n"
		if self.artist:
			result += f"[ar:{self.artist}]\n"
		for key, value in self.metadata.items():
			result += f"[{key}:{value}]\n"
		for line in self.lines:
			minutes, rest = divmod(line.timestamp, 60000)
			seconds, millis = divmod(rest, 1000)
			result += f"[{minutes:02d}:{seconds:02d}.{millis:03d}]{line.text}\n"
		return result


# ================
#  PROVIDER OUTCOMES
# ================
@dataclass(frozen=True)
class Found:
	lyrics: Lyrics


@dataclass(frozen=True)
class NotFound:
	"""The source answered and has no lyrics for the track"""


@dataclass(frozen=True)
class TransientFailure:
	"""The source could not answer this time; never cached"""

	reason: str = ""


@dataclass(frozen=True)
class CacheEntry:
	"""`lyrics` is None for a confirmed negative result"""

	lyrics: Optional[Lyrics]
