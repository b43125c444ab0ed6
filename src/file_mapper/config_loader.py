"""YAML configuration loading and validation.

This module handles loading and saving converter configuration from YAML
files. Every field is optional; missing fields take their defaults.
"""

import logging
import os
from typing import Any, Dict

import yaml

from .errors import ConfigError, FilesystemError
from .models import ConverterConfig

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        output_dir: "./exports"
        include_metadata: true
        page_link_scheme: "confluence"
        max_nesting_depth: 10
        max_file_size: 10485760
    """

    # Default values for optional fields
    DEFAULTS = {
        'output_dir': './exports',
        'include_metadata': True,
        'page_link_scheme': 'confluence',
        'max_nesting_depth': 10,
        'max_file_size': 10 * 1024 * 1024,
    }

    @classmethod
    def load(cls, config_path: str) -> ConverterConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            ConverterConfig object with parsed configuration

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        # Read file
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(
                config_path,
                'read',
                'Configuration file not found'
            )
        except PermissionError:
            raise FilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'read',
                str(e)
            )

        # Parse YAML
        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            logger.debug(f"Configuration file {config_path} is empty, using defaults")
            return ConverterConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, config: ConverterConfig) -> None:
        """Save configuration to a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            config: ConverterConfig object to save

        Raises:
            FilesystemError: If file cannot be written
        """
        config_dict = {
            'output_dir': config.output_dir,
            'include_metadata': config.include_metadata,
            'page_link_scheme': config.page_link_scheme,
            'max_nesting_depth': config.max_nesting_depth,
            'max_file_size': config.max_file_size,
        }

        # Generate YAML
        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        # Ensure directory exists
        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    config_dir,
                    'create_directory',
                    str(e)
                )

        # Write file
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise FilesystemError(
                config_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'write',
                str(e)
            )

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> ConverterConfig:
        """Parse and validate configuration dictionary.

        Args:
            config_dict: Raw configuration dictionary from YAML

        Returns:
            Validated ConverterConfig object

        Raises:
            ConfigError: If configuration is invalid
        """
        unknown_fields = set(config_dict.keys()) - set(cls.DEFAULTS.keys())
        if unknown_fields:
            raise ConfigError(
                f"Unknown fields: {', '.join(sorted(unknown_fields))}"
            )

        values = {**cls.DEFAULTS, **config_dict}

        include_metadata = values['include_metadata']
        if not isinstance(include_metadata, bool):
            raise ConfigError(
                f"Field 'include_metadata' must be true or false, got {include_metadata!r}",
                'include_metadata'
            )

        # Validate types
        try:
            output_dir = str(values['output_dir'])
            page_link_scheme = str(values['page_link_scheme'])
            max_nesting_depth = int(values['max_nesting_depth'])
            max_file_size = int(values['max_file_size'])
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid field type: {str(e)}"
            )

        # Validate values
        if not output_dir.strip():
            raise ConfigError(
                "Field 'output_dir' cannot be empty",
                'output_dir'
            )
        if not page_link_scheme.strip() or not page_link_scheme.isalnum():
            raise ConfigError(
                f"Field 'page_link_scheme' must be alphanumeric, got {page_link_scheme!r}",
                'page_link_scheme'
            )
        if max_nesting_depth < 1:
            raise ConfigError(
                f"Field 'max_nesting_depth' must be at least 1, got {max_nesting_depth}",
                'max_nesting_depth'
            )
        if max_file_size < 1:
            raise ConfigError(
                f"Field 'max_file_size' must be at least 1, got {max_file_size}",
                'max_file_size'
            )

        return ConverterConfig(
            output_dir=output_dir,
            include_metadata=include_metadata,
            page_link_scheme=page_link_scheme,
            max_nesting_depth=max_nesting_depth,
            max_file_size=max_file_size
        )
