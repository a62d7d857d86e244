"""Configuration loading and validation for the CLI.

This package provides utilities for loading, parsing, and validating project
settings from the tmscli.ini file.
"""

from config.loader import (
    DEFAULT_CONFIG_FILE,
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigLoaderError,
    ConfigTypeError,
    ConfigValueError,
)

__all__: list[str] = [
    "DEFAULT_CONFIG_FILE",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]
