"""
YAML configuration parser for pathfinder.

This module provides functionality to discover, load, parse and validate YAML
configuration files, and to configure logging from the result. A missing file
is not an error: the defaults are used instead.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..models.config import PathfinderConfig


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PATHFINDER_CONFIG"
PACKAGE_LOGGER = "pathfinder"


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed and validated configuration
        config_path: Path to the configuration file used
        is_default: Whether default configuration was used
    """
    config: PathfinderConfig
    config_path: Optional[Path]
    is_default: bool


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    Handles locating the configuration file, loading its YAML contents and
    converting them to a PathfinderConfig.
    """

    DEFAULT_CONFIG_NAMES = [
        '.pathfinder.yaml',
        '.pathfinder.yml',
    ]

    XDG_CONFIG_NAMES = [
        'config.yaml',
        'config.yml',
    ]

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse configuration from file or use defaults.

        Args:
            config_path: Path to configuration file. If None, searches the
                environment and the default locations.

        Returns:
            ConfigParseResult containing parsed configuration and metadata

        Raises:
            ConfigurationError: If configuration is invalid or file cannot be read
        """
        if config_path is None and os.getenv(CONFIG_ENV_VAR):
            config_path = os.environ[CONFIG_ENV_VAR]

        if config_path:
            config_path = Path(config_path).expanduser()
            if not config_path.is_file():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            config_data = self._load_yaml_file(config_path)
        else:
            config_path = self._find_config()
            config_data = self._load_yaml_file(config_path) if config_path else {}

        config = self._validate_config_data(config_data)
        self.logger.debug(f"Configuration loaded from {config_path or 'defaults'}")

        return ConfigParseResult(
            config=config,
            config_path=config_path,
            is_default=config_path is None
        )

    def get_search_paths(self) -> List[Path]:
        """Get candidate configuration files in lookup order."""
        home = Path.home()
        xdg_home = Path(os.getenv('XDG_CONFIG_HOME') or home / '.config')

        candidates = [home / name for name in self.DEFAULT_CONFIG_NAMES]
        candidates.extend(xdg_home / 'pathfinder' / name for name in self.XDG_CONFIG_NAMES)
        return candidates

    def _find_config(self) -> Optional[Path]:
        """
        Find the first existing configuration file in the default locations.

        Returns:
            Path to the configuration file or None if not found
        """
        for candidate in self.get_search_paths():
            if candidate.is_file():
                return candidate
        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

        # Empty document
        if data is None:
            return {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

        return data

    def _validate_config_data(self, config_data: Dict[str, Any]) -> PathfinderConfig:
        """
        Validate configuration data and build the config object.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            return PathfinderConfig.from_dict(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e


def load_config(config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        ConfigParseResult containing parsed configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parser = ConfigParser()
    return parser.load_config(config_path)


def setup_logging(config: PathfinderConfig) -> None:
    """
    Configure the package logger from the logging section.

    Records go to the configured file only; without one, they are dropped so
    nothing leaks onto stdout or stderr.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.propagate = False

    if not config.logging.file:
        package_logger.addHandler(logging.NullHandler())
        return

    try:
        handler = logging.FileHandler(config.logging.file, encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"Cannot open log file {config.logging.file}: {e}") from e

    handler.setFormatter(logging.Formatter(config.logging.format))
    package_logger.addHandler(handler)
    package_logger.setLevel(config.logging.get_level())
