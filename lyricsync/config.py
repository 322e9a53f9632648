"""
Configuration.

Defaults live in one nested dict. A JSON file can override any part of it, and
values written as {"env": NAME, "default": value} are read from the environment.
"""

import json
import os

import appdirs

from .exceptions import ConfigError
from .watcher import DEFAULT_MESSAGES

APP_NAME = "lyricsync"
CONFIG_FILES = ["config.json"]

DEFAULT_PRIORITIES = {
	"local": 0,
	"lrclib": 5,
	"netease": 10,
	"syncedlyrics": 20
}


def deep_merge_dicts(base, updates):
	for key, value in updates.items():
		if key in base and isinstance(base[key], dict) and isinstance(value, dict):
			deep_merge_dicts(base[key], value)
		else:
			base[key] = value


def resolve_value(item):
	"""Resolve {"env": ..., "default": ...} into actual value"""
	if isinstance(item, dict) and "env" in item and "default" in item:
		return os.environ.get(item["env"], item["default"])
	return item


def default_config():
	return {
		"global": {
			"logs_dir": appdirs.user_log_dir(APP_NAME),
			"log_file": "lyricsync.log",
			"log_level": {"env": "LYRICSYNC_LOG_LEVEL", "default": "WARN"},
			"max_log_bytes": 100 * 1024,
			"log_backups": 3,
			"enable_debug": {"env": "DEBUG", "default": "0"}
		},
		"lyrics": {
			"cache_size": 20,
			"search_timeout": 10,
			"local_dir": {"env": "LYRICSYNC_LYRICS_DIR", "default": os.path.join(appdirs.user_data_dir(APP_NAME), "lyrics")},
			"local_extension": "lrc",
			"sources": ["local", "lrclib", "netease"],
			"priorities": dict(DEFAULT_PRIORITIES)
		},
		"status_messages": dict(DEFAULT_MESSAGES)
	}


class ConfigManager:
	def __init__(self, config_path=None, use_default=False, overrides=None):
		self.user_config_dir = appdirs.user_config_dir(APP_NAME)
		self.config_path = config_path
		self.use_default = use_default

		self.config = self.load_config(overrides)
		self.setup_logging()
		self.setup_lyrics()
		self.setup_messages()

	@staticmethod
	def normalize_path(path: str) -> str:
		path = os.path.expanduser(path)
		if os.path.isabs(path):
			return os.path.normpath(path)
		return os.path.normpath(os.path.abspath(path))

	def load_config(self, overrides=None):
		merged_config = default_config()

		if not self.use_default:
			config_paths = [self.config_path] if self.config_path else [os.path.join(self.user_config_dir, f) for f in CONFIG_FILES]
			for path in config_paths:
				if path and os.path.exists(os.path.expanduser(path)):
					try:
						with open(os.path.expanduser(path), "r", encoding="utf-8") as f:
							file_config = json.load(f)
					except (OSError, ValueError) as e:
						raise ConfigError(f"Error loading config from {path}: {e}") from e
					if not isinstance(file_config, dict):
						raise ConfigError(f"Config file {path} must contain a JSON object")
					deep_merge_dicts(merged_config, file_config)
					break

		if overrides:
			deep_merge_dicts(merged_config, overrides)

		merged_config["global"]["enable_debug"] = str(resolve_value(merged_config["global"]["enable_debug"])) == "1"
		return merged_config

	def setup_logging(self):
		cfg = self.config["global"]
		self.LOG_DIR = self.normalize_path(resolve_value(cfg["logs_dir"]))
		self.LOG_FILE = cfg["log_file"]
		self.LOG_LEVEL = str(resolve_value(cfg["log_level"])).upper()
		self.MAX_LOG_BYTES = int(cfg["max_log_bytes"])
		self.LOG_BACKUPS = int(cfg["log_backups"])
		self.ENABLE_DEBUG_LOGGING = cfg["enable_debug"]

	def setup_lyrics(self):
		cfg = self.config["lyrics"]
		try:
			self.CACHE_SIZE = int(cfg["cache_size"])
			self.SEARCH_TIMEOUT = float(cfg["search_timeout"])
		except (TypeError, ValueError) as e:
			raise ConfigError(f"Invalid lyrics setting: {e}") from e
		if self.CACHE_SIZE < 1:
			raise ConfigError(f"cache_size must be at least 1, got {self.CACHE_SIZE}")
		if self.SEARCH_TIMEOUT <= 0:
			raise ConfigError(f"search_timeout must be positive, got {self.SEARCH_TIMEOUT}")

		self.LOCAL_DIR = self.normalize_path(resolve_value(cfg["local_dir"]))
		self.LOCAL_EXTENSION = cfg["local_extension"].lstrip(".")

		self.SOURCES = list(cfg["sources"])
		unknown = [name for name in self.SOURCES if name not in DEFAULT_PRIORITIES]
		if unknown:
			raise ConfigError(f"Unknown lyric sources: {', '.join(unknown)}")
		self.PRIORITIES = dict(DEFAULT_PRIORITIES)
		self.PRIORITIES.update(cfg.get("priorities", {}))

	def setup_messages(self):
		self.MESSAGES = self.config["status_messages"]
