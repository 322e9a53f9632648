"""
Playback position -> active lyric line.

`locate` is pure and O(log n); it is safe to call from the render loop as
often as needed. Index -1 (BEFORE_FIRST_LINE) means no line is active yet.
"""

import bisect
from operator import attrgetter

from .models import LyricLine, Lyrics

BEFORE_FIRST_LINE = -1

_TIMESTAMP = attrgetter("timestamp")


def _timestamps(lines):
	if isinstance(lines, Lyrics):
		return lines.timestamps
	return lines


def locate(lines, position):
	"""
	Index of the last line whose timestamp is <= position (ms).

	`lines` may be a Lyrics value, a sequence of LyricLine, or a sorted
	sequence of timestamps. A position equal to a timestamp selects that line;
	a position before the first line, or no lines at all, gives -1.
	"""
	timestamps = _timestamps(lines)
	if not timestamps:
		return BEFORE_FIRST_LINE
	if isinstance(timestamps[0], LyricLine):
		return bisect.bisect_right(timestamps, position, key=_TIMESTAMP) - 1
	return bisect.bisect_right(timestamps, position) - 1


def line_progress(timestamps, index, position):
	"""
	Fraction (0.0 to 1.0) of the way from line `index` to the next one.
	Used for smoother UI transitions; 0.0 for the last line or no line.
	"""
	if index < 0 or index >= len(timestamps) - 1:
		return 0.0
	start = timestamps[index]
	end = timestamps[index + 1]
	if end - start == 0:
		return 0.0
	fraction = (position - start) / (end - start)
	return max(0.0, min(1.0, fraction))


class LineTracker:
	"""
	Incremental lookup for steadily advancing playback.

	Checks the previous answer and the one after it first and falls back to
	`locate` for seeks. Results always equal `locate(timestamps, position)`.
	"""

	def __init__(self, lines):
		timestamps = _timestamps(lines)
		if timestamps and isinstance(timestamps[0], LyricLine):
			timestamps = map(_TIMESTAMP, timestamps)
		self.timestamps = tuple(timestamps)
		self.last_idx = BEFORE_FIRST_LINE

	def index(self, position):
		idx = self._forward_scan(position)
		if idx is None:
			idx = locate(self.timestamps, position)
		self.last_idx = idx
		return idx

	def changed(self, position):
		"""Return the new index when it differs from the last call, else None"""
		previous = self.last_idx
		idx = self.index(position)
		return idx if idx != previous else None

	def progress(self, position):
		return line_progress(self.timestamps, self.last_idx, position)

	def _forward_scan(self, position):
		timestamps = self.timestamps
		count = len(timestamps)
		if not count:
			return BEFORE_FIRST_LINE

		# valid answers are idx where ts[idx] <= position < ts[idx + 1]
		for idx in (self.last_idx, self.last_idx + 1):
			if idx < BEFORE_FIRST_LINE or idx >= count:
				continue
			if idx >= 0 and timestamps[idx] > position:
				continue
			if idx + 1 < count and timestamps[idx + 1] <= position:
				continue
			return idx
		return None
