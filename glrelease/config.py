#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import yaml

from .exit_codes import ConfigurationError

# Configure logging. stdout carries the JSON response, so everything else
# goes to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger("glrelease")

DEFAULT_API_URL = "https://gitlab.com/api/v4"
ENV_PREFIX = "GLRELEASE_"
TOKEN_ENV_VARS = ("GLRELEASE_ACCESS_TOKEN", "GITLAB_TOKEN")


def get_config_path() -> Optional[Path]:
    """Get the path to the configuration file.

    Only an explicit GLRELEASE_CONFIG is honoured: CI workers run the
    resource in throwaway containers with no home directory worth reading.
    """
    if 'GLRELEASE_CONFIG' in os.environ:
        path = Path(os.environ['GLRELEASE_CONFIG']).expanduser()
        if path.exists():
            return path
        logger.warning(f"GLRELEASE_CONFIG points to missing file {path}")
    return None


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "gitlab": {
            "api_url": DEFAULT_API_URL,
            "per_page": 100,
            "timeout_seconds": 30,
        },
        "upload": {
            "max_attempts": 10,
            "base_delay_seconds": 1.0,
            "max_delay_seconds": 30.0,
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s",
        },
    }


def load_config() -> Dict[str, Any]:
    """Load configuration: defaults, then the config file, then environment."""
    config = get_default_config()

    config_path = get_config_path()
    if config_path is not None:
        try:
            if config_path.suffix.lower() == '.toml':
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"error loading config from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"config file {config_path} must contain a mapping")
        config = merge_configs(config, file_config)

    return apply_env_overrides(config)


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
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _coerce_env_value(value: str) -> Any:
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GLRELEASE_SECTION_KEY
    For example: GLRELEASE_UPLOAD_MAX_ATTEMPTS=3
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        key_parts = env_key[len(ENV_PREFIX):].lower().split('_')
        typed_value = _coerce_env_value(value)

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that is a prefix of the remaining parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                if not isinstance(current_level[matched_key], dict):
                    current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def configure_logging(config: Dict[str, Any], debug: bool = False) -> None:
    """Apply the logging section of the configuration to the package logger."""
    log_config = config.get("logging", {})
    level_name = "DEBUG" if debug else str(log_config.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(f"unknown logging level: {level_name}")

    logger.setLevel(level)
    fmt = log_config.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


@dataclass
class Source:
    """
    Per-pipeline connection settings, taken from the request's `source`.

    Attributes:
        repository: GitLab project path (group/project) or numeric id
        access_token: Private or project access token
        gitlab_api_url: Base URL of the v4 API
        insecure: Skip TLS certificate verification
        tag_filter: Regular expression with one capture group
    """
    repository: str
    access_token: str = ""
    gitlab_api_url: str = DEFAULT_API_URL
    insecure: bool = False
    tag_filter: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, config: Optional[Dict[str, Any]] = None) -> 'Source':
        """
        Build a Source from the request payload.

        Missing values fall back to the environment (token) and to the
        loaded configuration (API URL).

        Raises:
            ConfigurationError: if the payload is not an object or has no repository
        """
        if not isinstance(data, dict):
            raise ConfigurationError("request is missing the 'source' object")

        repository = data.get('repository')
        if not repository:
            raise ConfigurationError("source.repository is required")

        config = config or get_default_config()

        token = data.get('access_token') or ''
        if not token:
            for env_var in TOKEN_ENV_VARS:
                if os.environ.get(env_var):
                    token = os.environ[env_var]
                    break

        api_url = data.get('gitlab_api_url') or config.get('gitlab', {}).get('api_url') or DEFAULT_API_URL

        return cls(
            repository=str(repository),
            access_token=token,
            gitlab_api_url=api_url.rstrip('/'),
            insecure=bool(data.get('insecure', False)),
            tag_filter=data.get('tag_filter') or None,
        )
