"""Configuration loading for ChatVoice."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Optional

import yaml

# Type alias for config dictionary
ConfigDict = dict[str, Any]

DEFAULT_PROFILE = "espeak"

DEFAULT_PROFILE_CONFIG: ConfigDict = {
    "command": "/usr/bin/espeak",
    "compose": "{command} -v {language} -a {volume} {text}",
    "language": "de",
    "volume": "200",
    "replacements": [],  # list of {pattern, replacement}
    "keywords": [],
    "keywords_active": False,
}

DEFAULT_CONFIG: ConfigDict = {
    # Speak messages in conversations without their own setting
    "active": True,
    # Shell that runs the speech commands
    "shell": "/bin/sh",
    # Selected entry of "profiles"
    "profile": DEFAULT_PROFILE,
    "profiles": {
        DEFAULT_PROFILE: DEFAULT_PROFILE_CONFIG,
    },
}

CONFIG_PATH = Path.home() / ".config" / "chatvoice" / "config.yaml"


def default_config() -> ConfigDict:
    """Return a fresh deep copy of the defaults."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(path: Optional[Path] = None) -> ConfigDict:
    """Load configuration from YAML file, falling back to defaults."""
    config = default_config()
    path = path or CONFIG_PATH

    if path.exists():
        with open(path) as f:
            user_config = yaml.safe_load(f) or {}
        user_profiles = user_config.pop("profiles", None) or {}
        config.update(user_config)
        for name, profile in user_profiles.items():
            merged = copy.deepcopy(DEFAULT_PROFILE_CONFIG)
            merged.update(profile or {})
            config["profiles"][name] = merged

    return config


def save_config(config: ConfigDict, path: Optional[Path] = None) -> None:
    """Write configuration to YAML file."""
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
