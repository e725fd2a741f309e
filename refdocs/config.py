#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .exit_codes import ConfigurationError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("refdocs")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the settings file.

    Checks in order:
    1. REFDOCS_CONFIG environment variable
    2. ~/.refdocs/ directory
    """
    if 'REFDOCS_CONFIG' in os.environ:
        path = Path(os.environ['REFDOCS_CONFIG']).expanduser()
        if path.exists():
            return path

    refdocs_dir = Path.home() / '.refdocs'
    for filename in CONFIG_FILENAMES:
        path = refdocs_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path for saving
    return refdocs_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "generator": {
            "command": ["doxygen", "-"],      # Reads its configuration from stdin
            "output_key": "OUTPUT_DIRECTORY",
            "config_file": "Doxyfile",         # Relative to the repository root
            "timeout_seconds": None            # None = wait indefinitely
        },
        "git": {
            "config_ref": "master",            # Reference the build config is read from
            "restore_ref": "master",           # Reference checked out after the run
            "timeout_seconds": 60
        },
        "build": {
            "reverse": False,
            "slug_separator": "-"
        },
        "site": {
            "title": "Documentation",
            "root": "/",                       # URL prefix the output tree is served under
            "entry_page": "html/index.html"    # Landing page inside each reference's tree
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def _read_config_file(config_path):
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ['.yaml', '.yml']:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"failed to load settings from {config_path}") from e
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"settings file {config_path} must contain a mapping")
        logger.debug(f"Loaded settings from {config_path}")
        config = merge_configs(config, file_config)

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.suffix.lower() in ['.yaml', '.yml']:
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    elif config_path.suffix.lower() == '.toml':
        raise ConfigurationError("writing TOML settings is not supported; use JSON or YAML")
    else:
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def configure_logging(config=None, debug=False):
    """Apply the logging section of the settings to the refdocs logger."""
    section = (config or {}).get("logging", {})
    level_name = "DEBUG" if debug else str(section.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    fmt = section.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))
    return logger


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REFDOCS_SECTION_KEY
    For example: REFDOCS_GIT_CONFIG_REF=main
    """
    env_prefix = "REFDOCS_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "REFDOCS_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config
