"""Configuration management for tempo_lite."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")

ENV_KEYS = (
    "TEMPO_DEFAULT_TIMEZONE",
    "TEMPO_LOG_LEVEL",
    "TEMPO_LOG_EXPANSION_STATS",
    "TEMPO_DEBUG",
)


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """Split a `KEY=value` line, ignoring comments and keys tempo_lite does not read."""
    key, sep, value = line.strip().partition("=")
    key = key.strip()
    if not sep or key.startswith("#") or key not in ENV_KEYS:
        return None
    return key, value.strip().strip("\"'")


class ConfigManager:
    """Manages engine configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Copy TEMPO_* settings from the .env file into the environment.

        Keys already present in the environment win; other keys in the file are
        left alone.

        Returns:
            Keys taken from the file, in file order
        """
        path = self.env_file_path
        if not path.is_file():
            logger.debug("No .env file at %s", path)
            return []

        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError:
            logger.warning("Could not read %s, using environment only", path, exc_info=True)
            return []

        applied = []
        for key, value in filter(None, map(_parse_env_line, lines)):
            if key in os.environ:
                continue
            os.environ[key] = value
            applied.append(key)

        if applied:
            logger.debug("Applied %s from %s", ", ".join(applied), path)
        return applied

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - TEMPO_DEFAULT_TIMEZONE -> 'default_timezone' (validated IANA name)
        - TEMPO_LOG_LEVEL -> 'log_level'
        - TEMPO_LOG_EXPANSION_STATS -> 'log_expansion_stats' (bool)

        Returns:
            Configuration dictionary accepted by RecurrenceExpanderConfig.from_settings
        """
        cfg: dict[str, Any] = {}

        if os.environ.get("TEMPO_DEFAULT_TIMEZONE"):
            cfg["default_timezone"] = get_default_timezone()

        log_level = os.environ.get("TEMPO_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level.upper()

        stats = os.environ.get("TEMPO_LOG_EXPANSION_STATS")
        if stats is not None:
            cfg["log_expansion_stats"] = stats.strip().lower() in _TRUTHY

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        Returns:
            Configuration dictionary
        """
        self.load_env_file()
        return self.build_config_from_env()


def get_default_timezone(fallback: str = "UTC") -> str:
    """Get default calendar timezone from environment with validation.

    Args:
        fallback: Fallback timezone if not configured or invalid

    Returns:
        Valid IANA timezone string
    """
    import zoneinfo

    timezone = os.environ.get("TEMPO_DEFAULT_TIMEZONE", fallback)

    try:
        zoneinfo.ZoneInfo(timezone)
        return timezone
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Invalid timezone %r, falling back to %r", timezone, fallback, exc_info=True
        )
        return fallback


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and dataclass-like objects.

    Args:
        config: Configuration object (dict or object with attributes)
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
