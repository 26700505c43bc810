"""Configuration management for Collections Explorer.

Loads environment variables (optionally from a .env file) and provides
centralized config access. Command-line options take precedence over
everything here.
"""
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

__version__ = "1.0.0"


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[Path] = None):
        """Initialize config by loading a .env file if present.

        Args:
            env_path: Explicit .env location; defaults to ./.env
        """
        load_dotenv(env_path if env_path is not None else Path.cwd() / ".env")

    @property
    def output_dir(self) -> Optional[str]:
        """Default report directory (COLLEXP_OUTPUT_DIR), or None for the working directory."""
        return os.getenv("COLLEXP_OUTPUT_DIR") or None

    @property
    def log_level(self) -> str:
        """Log level name (COLLEXP_LOG_LEVEL), INFO by default."""
        return os.getenv("COLLEXP_LOG_LEVEL", "INFO")

    @property
    def extra_ignored_dirs(self) -> List[str]:
        """Directory names skipped during corpus traversal in addition to the built-in ones.

        Read from the comma-separated COLLEXP_EXTRA_IGNORED_DIRS.
        """
        raw = os.getenv("COLLEXP_EXTRA_IGNORED_DIRS", "")
        return [name.strip() for name in raw.split(",") if name.strip()]


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _config
    _config = None
