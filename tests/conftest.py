"""Shared fixtures: an in-memory stand-in for aiohttp.ClientSession and sample data"""

import json

import pytest

from lyricsync import Track


class FakeResponse:
	def __init__(self, status=200, payload=None, error=None):
		self.status = status
		self.payload = payload
		self.error = error

	async def __aenter__(self):
		if self.error is not None:
			raise self.error
		return self

	async def __aexit__(self, exc_type, exc, tb):
		return False

	async def json(self, content_type="application/json"):
		if isinstance(self.payload, str):
			return json.loads(self.payload)
		return self.payload

	async def text(self):
		if isinstance(self.payload, str):
			return self.payload
		return json.dumps(self.payload)


class FakeSession:
	"""Answers GETs from a url -> [responses] table and records every call"""

	def __init__(self, routes=None):
		self.routes = {url: list(responses) for url, responses in (routes or {}).items()}
		self.calls = []
		self.closed = False

	def get(self, url, params=None, headers=None, timeout=None):
		self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
		responses = self.routes.get(url)
		if not responses:
			return FakeResponse(status=500, payload={"error": "no route"})
		return responses.pop(0) if len(responses) > 1 else responses[0]

	async def close(self):
		self.closed = True


@pytest.fixture
def track():
	return Track(artist="Test Artist", name="Test Song", album="Test Album", duration=180000)


@pytest.fixture
def sample_lrc():
	return (
		"[ti:Test Song]\n"
		"[ar:Test Artist]\n"
		"[00:01.00]First line\n"
		"[00:05.50]Second line\n"
		"[00:10.000]Third line\n"
	)
