"""
LRC parsing.

Turns raw lyric text from any source into a Lyrics value: timestamped lines
only, offset applied once, sorted stably by time.
"""

import re

from .exceptions import ParseError
from .logger import LOGGER
from .models import LyricLine, Lyrics

# [mm:ss.xx] or [mm:ss.xxx]
TIME_PATTERN = re.compile(r'\[(\d+):(\d{2})\.(\d{2,3})\]')
# [key:value], whole line
META_PATTERN = re.compile(r'^\[([a-z]+):(.*)\]$')
# <mm:ss.xx> word timing from enhanced (a2) files
WORD_TIME_PATTERN = re.compile(r'<\d+:\d+\.\d+>')


def parse_timestamp(time_str):
	"""Convert an `mm:ss.xx` / `mm:ss.xxx` marker body to milliseconds"""
	match = TIME_PATTERN.fullmatch(f"[{time_str.strip()}]")
	if not match:
		raise ParseError(f"Invalid time format: {time_str}")
	return _marker_to_ms(*match.groups())


def _marker_to_ms(minutes, seconds, fraction):
	try:
		millis = int(fraction) * 10 if len(fraction) == 2 else int(fraction)
		return (int(minutes) * 60 + int(seconds)) * 1000 + millis
	except ValueError as e:
		raise ParseError(f"Invalid timestamp [{minutes}:{seconds}.{fraction}]: {e}") from e


def apply_offset(lines, offset):
	"""Shift every timestamp by offset ms (positive delays), clamping at zero"""
	if not offset:
		return tuple(lines)
	return tuple(
		LyricLine(timestamp=max(0, line.timestamp + offset), text=line.text)
		for line in lines
	)


def parse_lrc(content):
	"""Parse LRC text into Lyrics. Empty or unusable input gives empty Lyrics."""
	collected = []
	metadata = {}
	offset = 0
	skipped = 0

	for raw_line in (content or "").splitlines():
		line = raw_line.strip()
		if not line:
			continue

		markers = TIME_PATTERN.findall(line)
		if not markers:
			meta_match = META_PATTERN.match(line)
			if meta_match:
				key, value = meta_match.group(1), meta_match.group(2).strip()
				if key == "offset":
					try:
						offset = int(value)
					except ValueError:
						LOGGER.log_debug(f"Ignoring unparseable offset tag: {value!r}")
				else:
					metadata[key] = value
			# credits and plain text lines carry no timing
			continue

		text = WORD_TIME_PATTERN.sub("", TIME_PATTERN.sub("", line)).strip()
		if not text:
			continue

		try:
			stamps = [_marker_to_ms(*marker) for marker in markers]
		except ParseError as e:
			skipped += 1
			LOGGER.log_trace(f"Skipping line: {e}")
			continue

		for stamp in stamps:
			collected.append(LyricLine(timestamp=stamp, text=text))

	if skipped:
		LOGGER.log_debug(f"Skipped {skipped} malformed lyric lines")

	# sorted() is stable: equal timestamps keep their parse order
	lines = tuple(sorted(apply_offset(collected, offset), key=lambda l: l.timestamp))

	return Lyrics(
		lines=lines,
		title=metadata.pop("ti", None) or None,
		artist=metadata.pop("ar", None) or None,
		offset=offset,
		metadata=metadata,
	)
