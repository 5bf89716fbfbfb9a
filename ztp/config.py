"""
Centralized configuration management for ztp.

Provides a unified interface for accessing environment variables and
configuration with defaults.
"""

import os
from pathlib import Path
from typing import Optional


class Config:
    """
    Centralized configuration management.

    Provides access to environment variables with sensible defaults.
    """

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get an environment variable with optional default.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            Environment variable value, default, or an empty string
        """
        return os.getenv(key, default) or ""

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        """
        Get a boolean environment variable.

        Args:
            key: Environment variable name
            default: Default value if not set or not recognized

        Returns:
            Boolean value
        """
        value = os.getenv(key, "").lower()
        if value in ("true", "1", "yes", "on"):
            return True
        elif value in ("false", "0", "no", "off"):
            return False
        return default

    @staticmethod
    def templates_dir() -> Path:
        """
        Get the directory that contains the template files.

        Checks ZTP_TEMPLATES_DIR environment variable first, then defaults
        to a 'templates' directory in the current working directory.
        """
        env_dir = os.getenv("ZTP_TEMPLATES_DIR")
        if env_dir:
            return Path(env_dir).resolve()
        return Path.cwd() / "templates"

    @staticmethod
    def templates_subdir() -> Optional[str]:
        """
        Get the subdirectory of the templates directory to load templates from.

        Returns:
            Subdirectory name or None if ZTP_TEMPLATES_SUBDIR is not set
        """
        return Config.get("ZTP_TEMPLATES_SUBDIR") or None

    @staticmethod
    def debug() -> bool:
        """Whether ZTP_DEBUG asks for detailed logging."""
        return Config.get_bool("ZTP_DEBUG")


# Global config instance for convenience
config = Config()
