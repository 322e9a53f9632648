"""Tests for track-change handling"""

import asyncio

from lyricsync import BEFORE_FIRST_LINE, LyricsManager, LyricsWatcher, Track, parse_lrc
from lyricsync.models import Found, NotFound, TransientFailure

from .test_manager import StubProvider

LRC = "[00:01.00]One\n[00:02.00]Two\n[00:03.00]Three"


class SlowPerTrack(StubProvider):
	"""Takes longer for some tracks, to let a later track finish first"""

	def __init__(self, delays):
		super().__init__("slow", 0, NotFound())
		self.delays = delays
		self.resolved = []

	async def resolve(self, track):
		self.calls += 1
		await asyncio.sleep(self.delays.get(track.name, 0))
		self.resolved.append(track.name)
		return Found(parse_lrc(LRC).with_defaults(title=track.name))


def run(coro):
	return asyncio.run(coro)


class TestLyricsWatcher:
	def test_loads_lyrics(self, track):
		manager = LyricsManager([StubProvider("p", 0, Found(parse_lrc(LRC)))])

		async def scenario():
			watcher = LyricsWatcher(manager)
			assert watcher.update(track)
			assert watcher.is_fetching
			assert watcher.status == "start"
			assert watcher.status_message().startswith("Searching for lyrics...")
			lyrics = await watcher.wait()
			return watcher, lyrics

		watcher, lyrics = run(scenario())
		assert len(lyrics) == 3
		assert watcher.status == "done"
		assert watcher.current_index(500) == BEFORE_FIRST_LINE
		assert watcher.current_index(2500) == 1
		assert watcher.current_index(1000) == 0

	def test_same_track_does_not_restart(self, track):
		provider = StubProvider("p", 0, Found(parse_lrc(LRC)))
		manager = LyricsManager([provider])

		async def scenario():
			watcher = LyricsWatcher(manager)
			watcher.update(track)
			await watcher.wait()
			assert not watcher.update(Track(artist=track.artist, name=track.name, position=90000))
			return watcher

		run(scenario())
		assert provider.calls == 1

	def test_no_lyrics(self, track):
		manager = LyricsManager([StubProvider("p", 0, NotFound())])

		async def scenario():
			watcher = LyricsWatcher(manager, messages={"failed": "no lyrics available"})
			watcher.update(track)
			return watcher, await watcher.wait()

		watcher, lyrics = run(scenario())
		assert lyrics is None
		assert watcher.status == "failed"
		assert watcher.status_message() == "no lyrics available"
		assert watcher.current_index(5000) == BEFORE_FIRST_LINE

	def test_late_result_for_previous_track_is_dropped(self):
		provider = SlowPerTrack({"First": 0.1, "Second": 0})
		manager = LyricsManager([provider])
		first = Track(artist="A", name="First")
		second = Track(artist="A", name="Second")

		async def scenario():
			watcher = LyricsWatcher(manager)
			watcher.update(first)
			await asyncio.sleep(0.01)
			watcher.update(second)
			lyrics = await watcher.wait()
			# let the abandoned lookup finish in the background
			await asyncio.sleep(0.2)
			return watcher, lyrics

		watcher, lyrics = run(scenario())
		assert lyrics.title == "Second"
		assert watcher.poll().title == "Second"
		assert sorted(provider.resolved) == ["First", "Second"]
		# still cached for when the first track comes back
		assert manager.cache.get(first.cache_key).lyrics.title == "First"

	def test_refresh(self, track):
		provider = StubProvider("p", 0, Found(parse_lrc(LRC)))
		manager = LyricsManager([provider])

		async def scenario():
			watcher = LyricsWatcher(manager)
			watcher.update(track)
			await watcher.wait()
			watcher.refresh()
			return await watcher.wait()

		assert len(run(scenario())) == 3
		assert provider.calls == 2

	def test_close(self, track):
		provider = StubProvider("p", 0, Found(parse_lrc(LRC)), delay=0.05)
		manager = LyricsManager([provider])

		async def scenario():
			watcher = LyricsWatcher(manager)
			watcher.update(track)
			watcher.close()
			assert not watcher.is_fetching
			return watcher, watcher.poll()

		watcher, lyrics = run(scenario())
		assert lyrics is None
		assert watcher.status_message() == ""

	def test_none_track_is_ignored(self):
		watcher = LyricsWatcher(LyricsManager([]))
		assert not watcher.update(None)
		assert watcher.poll() is None
		assert watcher.status_message() is None

	def test_retries_after_transient_failures(self, track):
		provider = StubProvider("p", 0, TransientFailure("timeout"), Found(parse_lrc(LRC)))
		manager = LyricsManager([provider])

		async def scenario():
			watcher = LyricsWatcher(manager, retry_interval=0)
			watcher.update(track)
			assert await watcher.wait() is None
			assert watcher.update(track)
			return await watcher.wait()

		assert len(run(scenario())) == 3
		assert provider.calls == 2

	def test_no_retry_before_interval_or_after_not_found(self, track):
		provider = StubProvider("p", 0, TransientFailure("timeout"))
		manager = LyricsManager([provider])

		async def scenario():
			watcher = LyricsWatcher(manager, retry_interval=3600)
			watcher.update(track)
			await watcher.wait()
			return watcher.update(track)

		assert run(scenario()) is False
		assert provider.calls == 1

		provider = StubProvider("p", 0, NotFound())
		manager = LyricsManager([provider])

		async def cached_negative():
			watcher = LyricsWatcher(manager, retry_interval=0)
			watcher.update(track)
			await watcher.wait()
			return watcher.update(track)

		assert run(cached_negative()) is False
		assert provider.calls == 1
