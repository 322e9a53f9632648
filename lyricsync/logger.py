"""
Application logging.

Levels follow the player's naming (FATAL..TRACE). Output goes to a rotating
file in the logs directory once configured, never to the terminal, which
belongs to the renderer.
"""

import logging
import logging.handlers
import os

LOG_LEVELS = {
	"FATAL": logging.CRITICAL,
	"ERROR": logging.ERROR,
	"WARN": logging.WARNING,
	"INFO": logging.INFO,
	"DEBUG": logging.DEBUG,
	"TRACE": 5
}

logging.addLevelName(LOG_LEVELS["TRACE"], "TRACE")


class Logger:
	"""Level-filtered logging facade used across the package"""

	def __init__(self, name="lyricsync"):
		self._logger = logging.getLogger(name)
		self._logger.addHandler(logging.NullHandler())
		self._file_handler = None

	@property
	def level(self):
		return self._logger.level

	def set_level(self, level: str):
		self._logger.setLevel(LOG_LEVELS.get(str(level).upper(), logging.WARNING))

	def configure(self, log_dir, log_file="lyricsync.log", level="WARN", max_bytes=100 * 1024, backups=3):
		"""Attach (or replace) the rotating file handler"""
		os.makedirs(log_dir, exist_ok=True)
		if self._file_handler is not None:
			self._logger.removeHandler(self._file_handler)
			self._file_handler.close()

		handler = logging.handlers.RotatingFileHandler(
			os.path.join(log_dir, log_file),
			maxBytes=max_bytes,
			backupCount=backups,
			encoding="utf-8"
		)
		handler.setFormatter(logging.Formatter("%(asctime)s.%(msecs)03d | %(levelname)s | %(message)s", "%Y-%m-%d %H:%M:%S"))
		self._logger.addHandler(handler)
		self._file_handler = handler
		self.set_level(level)
		return handler

	def close(self):
		"""Detach the file handler and fall back to the default level"""
		if self._file_handler is not None:
			self._logger.removeHandler(self._file_handler)
			self._file_handler.close()
			self._file_handler = None
		self._logger.setLevel(logging.NOTSET)

	def log_message(self, level: str, message: str):
		self._logger.log(LOG_LEVELS.get(level.upper(), logging.INFO), message)

	# Specific level helpers
	def log_fatal(self, message: str):
		self.log_message("FATAL", message)

	def log_error(self, message: str):
		self.log_message("ERROR", message)

	def log_warn(self, message: str):
		self.log_message("WARN", message)

	def log_info(self, message: str):
		self.log_message("INFO", message)

	def log_debug(self, message: str):
		self.log_message("DEBUG", message)

	def log_trace(self, message: str):
		self.log_message("TRACE", message)


LOGGER = Logger()


def configure_logging(config_manager):
	"""Point LOGGER at the configured logs directory"""
	return LOGGER.configure(
		config_manager.LOG_DIR,
		log_file=config_manager.LOG_FILE,
		level="DEBUG" if config_manager.ENABLE_DEBUG_LOGGING else config_manager.LOG_LEVEL,
		max_bytes=config_manager.MAX_LOG_BYTES,
		backups=config_manager.LOG_BACKUPS
	)
