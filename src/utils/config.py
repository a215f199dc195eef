"""Configuration management for Portfolio Tracker.

This module provides YAML configuration loading and access, plus the
environment overrides read from an optional ``.env`` file.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent.parent

DB_PATH_ENV_VAR = "PORTFOLIO_DB_PATH"
DEFAULT_DB_PATH = "data/portfolio.db"


class Config:
    """Simple configuration loader and accessor.

    Loads YAML configuration files and provides dict-like access to settings.

    Example:
        >>> config = Config.from_file("config/default.yaml")
        >>> tolerance = config.get("allocation.rebalance_tolerance", 2.0)
    """

    def __init__(self, config_dict: dict[str, Any]) -> None:
        """Initialize with configuration dictionary.

        Args:
            config_dict: Configuration data as nested dictionary
        """
        self._config = config_dict

    @classmethod
    def from_file(cls, filepath: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            filepath: Path to YAML configuration file

        Returns:
            Config instance with loaded configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            config_dict = {}

        return cls(config_dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Supports nested keys using dot notation (e.g., "storage.db_path").

        Args:
            key: Configuration key (supports dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get("storage.namespace")
            'portfolio_data'
            >>> config.get("missing.key", "fallback")
            'fallback'
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def __getitem__(self, key: str) -> Any:
        """Get configuration value using bracket notation.

        Raises:
            KeyError: If key not found
        """
        value = self.get(key)
        if value is None:
            raise KeyError(f"Configuration key not found: {key}")
        return value

    def to_dict(self) -> dict[str, Any]:
        """Get the full configuration as dictionary."""
        return self._config.copy()


def load_config(filepath: str | Path = None) -> Config:
    """Helper function to load configuration.

    Args:
        filepath: Path to YAML configuration file. If None, uses default path.

    Returns:
        Config instance
    """
    if filepath is None:
        filepath = PROJECT_ROOT / "config" / "default.yaml"
    return Config.from_file(filepath)


def resolve_db_path(config: Config, env_file: str | Path | None = None) -> Path:
    """Resolve the holdings database path.

    The ``PORTFOLIO_DB_PATH`` environment variable (optionally provided via a
    ``.env`` file) wins over ``storage.db_path`` in the YAML config. Relative
    paths are resolved against the project root.

    Args:
        config: Loaded application configuration
        env_file: Path to a .env file. If None, uses ``.env`` at the project root.

    Returns:
        Absolute path of the SQLite database file

    Example:
        >>> config = load_config()
        >>> db_path = resolve_db_path(config)
    """
    if env_file is None:
        env_file = PROJECT_ROOT / ".env"

    # .env is optional; without it only the real environment is consulted
    if Path(env_file).exists():
        load_dotenv(env_file)

    raw_path = os.getenv(DB_PATH_ENV_VAR) or config.get("storage.db_path", DEFAULT_DB_PATH)
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path
