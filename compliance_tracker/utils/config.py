"""
Configuration loading for the Compliance Tracker.
Reads YAML configuration files; environment variables override file values.
"""

import os
import logging
from functools import lru_cache
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

DEFAULT_API_CONFIG = "config/api_config.yaml"
DEFAULT_TRACKER_CONFIG = "config/tracker_config.yaml"

ENV_OVERRIDES = {
    "ADMIN_EMAIL": ("notifications", "recipient"),
    "NOTIFICATIONS_AUTO_SEND": ("notifications", "auto_send"),
    "MARKER_FILE": ("notifications", "marker_file"),
    "KAFKA_NOTIFICATION_TOPIC": ("notifications", "kafka_topic"),
    "SEED_FILE": ("storage", "seed_file"),
    "DISPLAY_LOCALE": ("display", "locale"),
    "DISPLAY_CURRENCY": ("display", "currency"),
}


def load_yaml(path: str) -> Dict[str, Any]:
    """Load a YAML file; a missing or empty file yields an empty dict."""
    if not os.path.exists(path):
        logger.warning(f"Config file not found: {path}")
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def _coerce(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


@lru_cache(maxsize=1)
def get_api_config() -> Dict[str, Any]:
    return load_yaml(os.getenv("API_CONFIG", DEFAULT_API_CONFIG))


@lru_cache(maxsize=1)
def get_tracker_config() -> Dict[str, Any]:
    """
    Tracker settings with environment overrides applied.

    Returns:
        Dictionary with "display", "notifications" and "storage" sections
    """
    config = load_yaml(os.getenv("TRACKER_CONFIG", DEFAULT_TRACKER_CONFIG))
    for section in ("display", "notifications", "storage"):
        config.setdefault(section, {})

    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            config[section][key] = _coerce(value)

    return config


def reload_config() -> None:
    """Drop cached configuration so the next read picks up file and env changes."""
    get_api_config.cache_clear()
    get_tracker_config.cache_clear()
