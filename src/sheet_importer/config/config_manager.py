"""Configuration management for the sheet importer.

This module provides configuration loading from YAML files with
environment variable overrides and validation.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from sheet_importer.models.data_models import (
    Config,
    ConfigurationError,
    ImportSettings,
    LoggingConfig,
)


logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")

BOOLEAN_SETTINGS = {
    ("logging", "file", "enabled"),
    ("import", "delete_after_finished"),
    ("import", "lift_resource_limits"),
}


class ConfigManager:
    """Manages application configuration loading and validation.

    Configuration Loading Order:
    1. If config_path is provided, load that file
    2. If config_path is None, try to load config/default.yaml
    3. If config/default.yaml doesn't exist, use built-in defaults

    Environment variables prefixed with ``SHEET_IMPORTER_`` override
    values from either source.

    Example:
        >>> config = ConfigManager().load_config()
        >>> config.import_settings.delete_after_finished
        False
    """

    ENV_PREFIX = "SHEET_IMPORTER_"

    DEFAULT_CONFIG_PATH = Path("config/default.yaml")

    DEFAULT_CONFIG: Dict[str, Any] = {
        "import": {
            "delete_after_finished": False,
            "lift_resource_limits": False,
            "output_format": "json",
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": {
                "enabled": False,
                "path": "./logs/sheet_importer.log",
            },
            "console": {
                "enabled": True,
            },
            "structured": {
                "enabled": False,
            },
        },
    }

    def __init__(self) -> None:
        self._config_cache: Dict[str, Config] = {}

    def load_config(
        self,
        config_path: Optional[Union[str, Path]] = None,
        use_env_overrides: bool = True
    ) -> Config:
        """Load configuration from file with optional environment overrides.

        Args:
            config_path: Path to configuration file. If None, will try to load
                        config/default.yaml, falling back to built-in defaults
            use_env_overrides: Whether to apply environment variable overrides

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        cache_key = f"{config_path}:{use_env_overrides}"
        if cache_key in self._config_cache:
            logger.debug(f"Using cached configuration for {cache_key}")
            return self._config_cache[cache_key]

        try:
            config_dict = self._load_config_dict(config_path)

            if use_env_overrides:
                config_dict = self._apply_env_overrides(config_dict)

            config = self._dict_to_config(config_dict)
        except ConfigurationError:
            raise
        except (ValueError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self._config_cache[cache_key] = config
        logger.debug(f"Configuration loaded from {config_path or 'defaults'}")
        return config

    def clear_cache(self) -> None:
        """Forget previously loaded configurations."""
        self._config_cache.clear()

    def _load_config_dict(self, config_path: Optional[Union[str, Path]]) -> Dict[str, Any]:
        if config_path is None:
            if not self.DEFAULT_CONFIG_PATH.exists():
                return copy.deepcopy(self.DEFAULT_CONFIG)
            config_path = self.DEFAULT_CONFIG_PATH

        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_file}")

        return self._deep_merge(copy.deepcopy(self.DEFAULT_CONFIG), file_config)

    def _apply_env_overrides(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        env_mappings = {
            f"{self.ENV_PREFIX}LOG_LEVEL": ["logging", "level"],
            f"{self.ENV_PREFIX}LOG_FILE_ENABLED": ["logging", "file", "enabled"],
            f"{self.ENV_PREFIX}LOG_FILE_PATH": ["logging", "file", "path"],
            f"{self.ENV_PREFIX}DELETE_AFTER_FINISHED": ["import", "delete_after_finished"],
            f"{self.ENV_PREFIX}LIFT_RESOURCE_LIMITS": ["import", "lift_resource_limits"],
            f"{self.ENV_PREFIX}OUTPUT_FORMAT": ["import", "output_format"],
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                converted_value = self._convert_env_value(env_value, config_path, env_var)
                self._set_nested_value(config_dict, config_path, converted_value)
                logger.debug(f"Applied environment override: {env_var}={converted_value}")

        return config_dict

    def _convert_env_value(self, value: str, config_path: List[str], env_var: str) -> Any:
        if tuple(config_path) in BOOLEAN_SETTINGS:
            return self._parse_bool(value, env_var)
        return value

    def _parse_bool(self, value: Any, name: str) -> bool:
        """Interpret a boolean setting, rejecting anything ambiguous."""
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
        raise ConfigurationError(
            f"{name} must be a boolean (true/false, yes/no, on/off, 1/0), got {value!r}"
        )

    def _set_nested_value(self, dictionary: Dict[str, Any], path: List[str], value: Any) -> None:
        for key in path[:-1]:
            dictionary = dictionary.setdefault(key, {})
        dictionary[path[-1]] = value

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> Config:
        import_section = config_dict.get("import", {})
        logging_section = config_dict.get("logging", {})

        logging_config = LoggingConfig(
            level=logging_section.get("level", "INFO"),
            format=logging_section.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            file_enabled=self._parse_bool(
                logging_section.get("file", {}).get("enabled", False), "logging.file.enabled"
            ),
            file_path=Path(logging_section.get("file", {}).get("path", "./logs/sheet_importer.log")),
            console_enabled=self._parse_bool(
                logging_section.get("console", {}).get("enabled", True), "logging.console.enabled"
            ),
            structured_enabled=self._parse_bool(
                logging_section.get("structured", {}).get("enabled", False), "logging.structured.enabled"
            ),
        )

        import_settings = ImportSettings(
            delete_after_finished=self._parse_bool(
                import_section.get("delete_after_finished", False), "import.delete_after_finished"
            ),
            lift_resource_limits=self._parse_bool(
                import_section.get("lift_resource_limits", False), "import.lift_resource_limits"
            ),
            output_format=str(import_section.get("output_format", "json")),
        )

        return Config(logging=logging_config, import_settings=import_settings)


# Shared instance used by the CLI
config_manager = ConfigManager()
