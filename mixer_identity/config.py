"""Configuration for mixer-identity.

Defaults come from ``constants``; an optional JSON file at
~/.mixer-identity/config.json overrides them, and CLI flags override both.

Expected format (every key optional):
{
    "display_name": "My Player",
    "icon_path": "C:\\\\Program Files\\\\MyPlayer\\\\player.exe,0",
    "release_delay": 0.1,
    "max_ancestry_depth": 4096,
    "log_level": "INFO",
    "port": 5112
}
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import fields

from . import constants
from .models import Config, MixerIdentityError

logger = logging.getLogger(__name__)

# Loaded once on first call
_file_config: dict | None = None


def _load_file() -> dict:
    """Read the JSON config file, returning {} if it is missing or malformed."""
    global _file_config
    if _file_config is not None:
        return _file_config
    _file_config = {}
    if os.path.exists(constants.CONFIG_PATH):
        try:
            with open(constants.CONFIG_PATH, encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                _file_config = data
            else:
                logger.warning("Ignoring %s: top level is not an object", constants.CONFIG_PATH)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", constants.CONFIG_PATH, e)
    return _file_config


def load_config(**overrides) -> Config:
    """Build the effective Config. ``None`` overrides are ignored."""
    known = {f.name for f in fields(Config)}
    values = {}
    for key, value in _load_file().items():
        if key in known:
            values[key] = value
        else:
            logger.debug("Unknown config key %r ignored", key)
    values.update({k: v for k, v in overrides.items() if v is not None})

    config = Config(**values)
    try:
        config.release_delay = float(config.release_delay)
        config.max_ancestry_depth = int(config.max_ancestry_depth)
        config.port = int(config.port)
    except (TypeError, ValueError) as e:
        raise MixerIdentityError(f"Invalid configuration value: {e}") from e
    if config.release_delay < 0:
        raise MixerIdentityError("release_delay must not be negative")
    if config.max_ancestry_depth < 1:
        raise MixerIdentityError("max_ancestry_depth must be at least 1")
    if not config.display_name:
        raise MixerIdentityError("display_name must not be empty")
    config.log_level = str(config.log_level).upper()
    return config
