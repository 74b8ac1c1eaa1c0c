"""Configuration manager for the NLS resolver.

This module provides functionality for loading and validating YAML
configuration files with Pydantic model validation.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .schema import ResolverConfig
from ..utils.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads ``ResolverConfig`` YAML files."""

    @staticmethod
    def load_config(config_path: Path) -> ResolverConfig:
        """
        Load and validate configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            ResolverConfig: Validated configuration object

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ConfigurationError: If the YAML is invalid or not a mapping
            pydantic.ValidationError: If the configuration fails validation
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                raw_config_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML syntax in {config_path}: {e}", context=config_path
            ) from e

        if raw_config_data is None:
            config_data: dict[str, object] = {}
        elif isinstance(raw_config_data, dict):
            config_data = raw_config_data  # pyright: ignore[reportUnknownVariableType]
        else:
            raise ConfigurationError(
                f"Configuration file must contain a YAML dictionary, got {type(raw_config_data).__name__}",
                context=config_path,
            )

        return ResolverConfig.model_validate(config_data)

    @staticmethod
    def load_or_default(config_path: Path | None) -> ResolverConfig:
        """
        Load configuration, falling back to defaults when no usable file is present.

        Unreadable, malformed or invalid settings are logged and replaced by the
        defaults so that startup never fails on them.

        Args:
            config_path: Optional path to the YAML configuration file

        Returns:
            ResolverConfig: Loaded or default configuration
        """
        if config_path is None or not config_path.exists():
            logger.debug(f"No resolver configuration at {config_path}, using defaults")
            return ResolverConfig()

        try:
            config = ConfigManager.load_config(config_path)
        except (ConfigurationError, ValidationError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Ignoring resolver configuration {config_path}: {e}")
            logger.info("Using default resolver configuration")
            return ResolverConfig()

        logger.info(f"Loaded resolver configuration from {config_path}")
        return config

