"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

APP_NAME = "strategic-planner"
APP_AUTHOR = "strategic-planner"

STORAGE_BACKENDS = ("file", "sqlite", "memory")


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	storage_dir: Path = field(init=False)
	db_path: Path = field(init=False)
	log_dir: Path = field(init=False)

	# User-configurable
	storage_backend: str = "file"
	log_level: str = "WARNING"
	probe_host: str = "1.1.1.1"
	probe_port: int = 53

	def __post_init__(self) -> None:
		self.storage_dir = self.data_dir / "storage"
		self.db_path = self.data_dir / "planner.db"
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


def _apply_env_overrides(config: Config) -> Config:
	"""Apply STRATEGIC_PLANNER_* environment variable overrides."""
	path_env = {
		"STRATEGIC_PLANNER_CONFIG_DIR": "config_dir",
		"STRATEGIC_PLANNER_DATA_DIR": "data_dir",
	}
	for env_key, attr in path_env.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, Path(val))

	value_env = {
		"STRATEGIC_PLANNER_STORAGE_BACKEND": "storage_backend",
		"STRATEGIC_PLANNER_LOG_LEVEL": "log_level",
	}
	for env_key, attr in value_env.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, val)

	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	path_fields = {"config_dir", "data_dir"}
	derived_fields = {"storage_dir", "db_path", "log_dir"}
	for key, val in data.items():
		if key in derived_fields or not hasattr(config, key):
			continue
		if key in path_fields:
			setattr(config, key, Path(os.path.expanduser(val)))
		else:
			setattr(config, key, val)

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""
	Load config with precedence: env vars > config.toml > defaults.

	Raises:
		ValueError: If storage_backend names an unknown backend
	"""
	config = Config()
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	if config.storage_backend not in STORAGE_BACKENDS:
		raise ValueError(
			f"Unknown storage_backend {config.storage_backend!r} (expected one of {', '.join(STORAGE_BACKENDS)})"
		)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
