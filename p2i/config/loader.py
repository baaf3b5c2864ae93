"""
Configuration loader for postman2insomnia.

This module handles loading and parsing of p2i_config.json converter
settings and of transform rule configuration files.
"""

import json
import os
from typing import Dict, Any, Optional

from .models import P2IConfig, TransformConfig
from ..utils.exceptions import ConfigurationError
from ..utils.constants import DEFAULT_CONFIG_PATH


class ConfigLoader:
    """
    Configuration loader class for converter settings and transform rules.

    Every failure is reported as a ConfigurationError; deciding whether to
    abort or to fall back to defaults is left to the caller.
    """

    @classmethod
    def load(cls, config_path: str = DEFAULT_CONFIG_PATH) -> P2IConfig:
        """
        Load converter settings from a p2i_config.json file.

        Args:
            config_path: Path to the configuration file

        Returns:
            P2IConfig object with validated configuration

        Raises:
            ConfigurationError: If config file doesn't exist, is invalid JSON,
                               or holds invalid values
        """
        print(f"📋 Loading configuration from {config_path}...")

        config_dict = cls.load_raw(config_path)

        try:
            config = P2IConfig.from_dict(config_dict)
        except ConfigurationError:
            raise
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"Error parsing configuration: {e}")

        print(f"   📊 Configuration loaded successfully:")
        print(f"      Output: {config.output.directory} ({config.output.format})")
        print(f"      Transforms: preprocess={config.transforms.preprocess}, "
              f"postprocess={config.transforms.postprocess}, "
              f"experimental={config.transforms.experimental}")

        return config

    @classmethod
    def load_transform_config(
        cls,
        config_path: str,
        defaults: Optional[TransformConfig] = None
    ) -> TransformConfig:
        """
        Load a transform rule configuration file.

        Args:
            config_path: Path to a JSON file with preprocess/postprocess arrays
            defaults: Rule lists used for a phase the file does not declare

        Returns:
            TransformConfig with the rules in file order

        Raises:
            ConfigurationError: If the file is missing, unreadable, not JSON,
                               or contains malformed rules
        """
        config_dict = cls.load_raw(config_path)
        return TransformConfig.from_dict(config_dict, defaults=defaults)

    @classmethod
    def load_raw(cls, config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
        """
        Load a configuration file as a raw dictionary without validation.

        Raises:
            ConfigurationError: If config file doesn't exist or is invalid JSON
        """
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
        except (IOError, OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}")
