"""
Configuration loading for the Breakroom news feed client.

Settings come from ``config.json`` next to this module, with a few values
overridable through environment variables.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, TypedDict, cast

from breakroom.models import MissingFieldPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 15.0
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "BreakroomNewsBot/1.0"
DEFAULT_MAX_WORKERS = 8


class Settings(TypedDict):
    """Type definition for resolved settings."""

    feed_url: Optional[str]
    connect_timeout: float
    read_timeout: float
    user_agent: str
    parallel_thumbnails: bool
    max_workers: int
    missing_field_policy: MissingFieldPolicy


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file."""
    # Build absolute path relative to this module
    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, config_filename)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using defaults.", config_path)
        return {}


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def get_settings(config: Optional[Dict[str, Any]] = None) -> Settings:
    """Merges the config file, defaults and environment overrides."""
    if config is None:
        config = load_config()

    try:
        policy = MissingFieldPolicy(config.get("missing_field_policy", "skip"))
    except ValueError:
        logger.warning(
            "Unknown missing_field_policy %r. Falling back to skip.",
            config.get("missing_field_policy"),
        )
        policy = MissingFieldPolicy.SKIP

    max_workers = int(config.get("max_workers", DEFAULT_MAX_WORKERS))
    if max_workers < 1:
        logger.warning(
            "max_workers must be positive, got %d. Using %d.",
            max_workers,
            DEFAULT_MAX_WORKERS,
        )
        max_workers = DEFAULT_MAX_WORKERS

    return Settings(
        feed_url=os.environ.get("BREAKROOM_FEED_URL", config.get("feed_url")),
        connect_timeout=_env_float(
            "BREAKROOM_CONNECT_TIMEOUT",
            float(config.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)),
        ),
        read_timeout=_env_float(
            "BREAKROOM_READ_TIMEOUT",
            float(config.get("read_timeout", DEFAULT_READ_TIMEOUT)),
        ),
        user_agent=cast(str, config.get("user_agent", DEFAULT_USER_AGENT)),
        parallel_thumbnails=bool(config.get("parallel_thumbnails", True)),
        max_workers=max_workers,
        missing_field_policy=policy,
    )
