"""Exceptions raised inside lyricsync"""


class LyricsError(Exception):
	"""Base class for lyricsync errors"""


class ParseError(LyricsError, ValueError):
	"""A single timestamp or line could not be parsed"""


class ProviderError(LyricsError):
	"""
	Raised by the remote helpers when a request fails in a way that may
	succeed later (timeout, connection, bad status, undecodable body).
	"""

	def __init__(self, provider, message):
		self.provider = provider
		self.message = message
		super().__init__(f"{provider}: {message}")


class ConfigError(LyricsError):
	"""Invalid configuration value"""
