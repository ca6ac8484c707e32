"""Configuration manager for locale-sync.

This module provides functionality for loading, validating, and saving
YAML configuration files with Pydantic model validation.
"""

import logging
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..utils.core.exceptions import ConfigurationError
from .schema import LocaleSyncConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Configuration manager for handling YAML config files with Pydantic validation.

    Provides methods for loading, saving and creating configuration files
    while ensuring atomic write operations.
    """

    @staticmethod
    def load_config(config_path: Path) -> LocaleSyncConfig:
        """
        Load and validate configuration from a YAML file.

        A relative `storage.locales_root` is resolved against the directory
        containing the configuration file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            LocaleSyncConfig: Validated configuration object

        Raises:
            FileNotFoundError: If the config file doesn't exist
            yaml.YAMLError: If the YAML syntax is invalid
            ConfigurationError: If the file does not contain a mapping
            ValidationError: If the configuration fails Pydantic validation
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                raw_config_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if raw_config_data is None:
            config_data: dict[str, object] = {}
        elif isinstance(raw_config_data, dict):
            config_data = raw_config_data  # pyright: ignore[reportUnknownVariableType]
        else:
            raise ConfigurationError(
                f"Configuration file must contain a YAML dictionary, got {type(raw_config_data).__name__}",
                context=config_path,
            )

        try:
            config = LocaleSyncConfig.model_validate(config_data)
        except ValidationError as e:
            logger.error(f"Invalid configuration in {config_path}: {e}")
            raise

        locales_root = config.storage.locales_root
        if not locales_root.is_absolute():
            storage = config.storage.model_copy(
                update={"locales_root": config_path.parent / locales_root}
            )
            config = config.model_copy(update={"storage": storage})

        logger.debug(f"Loaded configuration from {config_path}")
        return config

    @staticmethod
    def save_config(config: LocaleSyncConfig, config_path: Path) -> None:
        """
        Save configuration to a YAML file with an atomic operation.

        Args:
            config: Configuration object to save
            config_path: Path where to save the configuration

        Raises:
            OSError: If file operations fail
        """
        content_to_write = yaml.safe_dump(
            config.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            indent=2,
        )

        # Atomic save operation using temporary file
        temp_file = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=config_path.parent,
                prefix=f".{config_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp_file:
                _ = temp_file.write(content_to_write)
                temp_file.flush()
                temp_path = Path(temp_file.name)

            # Atomic move
            _ = temp_path.replace(config_path)

        except Exception as e:
            # Clean up temporary file if it exists
            if temp_file and Path(temp_file.name).exists():
                Path(temp_file.name).unlink(missing_ok=True)
            raise OSError(f"Failed to save configuration to {config_path}: {e}") from e

    @staticmethod
    def get_default_config(locales_root: Path | None = None) -> LocaleSyncConfig:
        """
        Get a configuration object with default values.

        Args:
            locales_root: Optional locales root overriding the default
        """
        config = LocaleSyncConfig()
        if locales_root is not None:
            storage = config.storage.model_copy(update={"locales_root": locales_root})
            config = config.model_copy(update={"storage": storage})
        return config

    @staticmethod
    def create_sample_config(sample_path: Path) -> None:
        """
        Create a sample configuration file with all options and documentation.

        Args:
            sample_path: Path where to create the sample configuration file
        """
        _ = sample_path.parent.mkdir(parents=True, exist_ok=True)
        _ = sample_path.write_text(ConfigManager._generate_sample_content(), encoding="utf-8")

    @staticmethod
    def _generate_sample_content() -> str:
        return """# locale-sync configuration file
# Copy this file to locale-sync.yml and modify the values as needed.

# ============================================================================
# Storage
# ============================================================================
storage:
  # Root directory holding one directory per language. Relative paths are
  # resolved against the directory of this file.
  locales_root: locales

  # Namespace file created for a new language
  default_namespace: common

  # Indentation of written resource files (1-8)
  indent: 2

# ============================================================================
# Sync behaviour
# ============================================================================
sync:
  # Language used when the host does not provide one
  language: en

  # Seconds without new missing keys before they are written (0-60)
  flush_quiet_period: 1.0

  # Seconds without file changes before resources are reloaded (0-60)
  reload_quiet_period: 1.0

  # Schedule another flush when a resource file is locked
  retry_busy_writes: true

  # Automatic retries in a row before a locked file is left for the next
  # missing key (0-100)
  max_busy_retries: 5

# ============================================================================
# Logging
# ============================================================================
logging:
  # Console log level (DEBUG, INFO, WARNING, ERROR)
  level: INFO

  # Optional rotating log file
  file: null
"""
