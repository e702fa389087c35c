"""
Configuration management package for pathfinder.

This package provides configuration discovery, parsing and validation, and
logging setup.
"""

from ..errors import ConfigurationError
from .parser import (
    ConfigParser,
    ConfigParseResult,
    load_config,
    setup_logging
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'load_config',
    'setup_logging'
]
