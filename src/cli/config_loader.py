"""YAML configuration loading and validation.

This module handles loading export configuration from YAML files.
Credentials are not part of this file; they come from the environment
(see src.inkdrop_client.auth).
"""

import os
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError, ConfigNotFoundError
from .models import ExportConfig


class ConfigLoader:
    """Handles configuration file loading and validation.

    Configuration file structure:
        book_id: "book:tjnPbJakw"
        output_dir: "./site/content/posts"
        files_dir: "./site/static/images"    # default: <output_dir>/images
        files_url_prefix: "/images/"          # default: relative path from output_dir
        notes_url_prefix: "./"
        require_public: true
        live: false
        interval: 0.5
        since: 1234                           # optional
    """

    DEFAULT_CONFIG_PATH = '.inkdrop-export/config.yaml'

    # Required top-level config fields
    REQUIRED_FIELDS = {'book_id', 'output_dir'}

    # Default values for optional fields
    DEFAULTS = {
        'files_dir': '',
        'files_url_prefix': '',
        'notes_url_prefix': './',
        'require_public': False,
        'live': False,
        'interval': 0.5,
        'since': None,
    }

    @classmethod
    def load(cls, config_path: str, overrides: Optional[Dict[str, Any]] = None) -> ExportConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            overrides: Values taking precedence over the file (None values ignored)

        Returns:
            ExportConfig object with parsed configuration

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigNotFoundError(config_path)
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}")

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            config_dict = {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls.from_dict(config_dict, overrides)

    @classmethod
    def from_dict(
        cls,
        config_dict: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ExportConfig:
        """Validate a configuration dictionary and fill in defaults.

        Raises:
            ConfigError: If configuration is invalid
        """
        merged = {**cls.DEFAULTS, **config_dict}
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key] = value

        unknown = set(merged) - set(cls.DEFAULTS) - cls.REQUIRED_FIELDS
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}")

        missing = sorted(f for f in cls.REQUIRED_FIELDS if not merged.get(f))
        if missing:
            raise ConfigError(f"Missing required fields: {', '.join(missing)}")

        for field_name in ('book_id', 'output_dir', 'files_dir', 'files_url_prefix', 'notes_url_prefix'):
            if not isinstance(merged[field_name], str):
                raise ConfigError("must be a string", config_field=field_name)

        if not merged['book_id'].startswith('book:'):
            raise ConfigError("must start with 'book:'", config_field='book_id')

        for field_name in ('require_public', 'live'):
            if not isinstance(merged[field_name], bool):
                raise ConfigError("must be a boolean", config_field=field_name)

        interval = merged['interval']
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            raise ConfigError("must be a positive number", config_field='interval')

        since = merged['since']
        if since is not None and (isinstance(since, bool) or not isinstance(since, int) or since < 0):
            raise ConfigError("must be a non-negative integer", config_field='since')

        files_dir = merged['files_dir'] or os.path.join(merged['output_dir'], 'images')
        files_url_prefix = merged['files_url_prefix']
        if not files_url_prefix:
            relative = os.path.relpath(files_dir, merged['output_dir']).replace(os.sep, '/')
            files_url_prefix = f"{relative}/" if relative.startswith('..') else f"./{relative}/"

        return ExportConfig(
            book_id=merged['book_id'],
            output_dir=merged['output_dir'],
            files_dir=files_dir,
            files_url_prefix=files_url_prefix,
            notes_url_prefix=merged['notes_url_prefix'],
            require_public=merged['require_public'],
            live=merged['live'],
            interval=float(interval),
            since=since,
        )
