"""Project configuration file loader and validator.

Reads the INI project file (``tmscli.ini`` by default), coerces each value to the
type declared by the ``Config`` dataclasses, applies command-line overrides and
validates the result. Any problem is reported as a ``ConfigLoaderError``.
"""

from __future__ import annotations

import ast
import configparser
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from yarl import URL

from models.config_models import Config
from models.credential_models import NO_PROJECT
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "DEFAULT_CONFIG_FILE",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "tmscli.ini"


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of the project configuration.

    Args:
        config_filename (str | Path): INI file to load.
        script_name (str): Executing script name, used in error messages.
        **args: Command-line overrides. Recognized keys are ``api_url``,
            ``project_id``, ``api_key`` and ``debug``; None values are ignored.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str | Path = DEFAULT_CONFIG_FILE,
        script_name: str = "tmscli",
        **args: Any,
    ) -> None:
        config_path = Path(config_filename)
        msg: str
        if not config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Create '{config_path.name}' in the project directory or pass the settings to '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        parser: ConfigParser = ConfigParser()

        try:
            parser.read(config_path, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.config = Config()
        self.config.GENERAL.SCRIPT_NAME = script_name
        self._convert_settings(parser)
        self.apply_overrides(self.config, **args)
        self.validate(self.config)
        logger.debug("Loaded configuration from '%s'", config_path)

    @classmethod
    def defaults(cls, *, script_name: str = "tmscli", **args: Any) -> Config:
        """Build a validated configuration without a file, from defaults and overrides only."""
        config = Config()
        config.GENERAL.SCRIPT_NAME = script_name
        cls.apply_overrides(config, **args)
        cls.validate(config)
        return config

    @staticmethod
    def apply_overrides(config: Config, **args: Any) -> None:
        if args.get("api_url") is not None:
            config.API.URL = args["api_url"]
        if args.get("project_id") is not None:
            config.API.PROJECT_ID = args["project_id"]
        if args.get("api_key") is not None:
            config.API.API_KEY = args["api_key"]
        if args.get("debug", False):
            config.GENERAL.DEBUG = True

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Copy every known INI value into the Config object, coerced to its field type.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Skipping undefined section: '%s'", section.name)
                continue
            for key in fields(getattr(self.config, section.name)):
                if not parser.has_option(section.name, key.name):
                    logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                    continue
                formatted_value = formatter.apply_format(section, key)
                setattr(getattr(self.config, section.name), key.name, formatted_value)

        for section_name in parser.sections():
            if not hasattr(self.config, section_name):
                logger.warning("Unknown section '%s' in configuration file; ignored.", section_name)

    @classmethod
    def validate(cls, config: Config) -> None:
        """Validate the API URL and project id settings.

        Raises:
            ConfigValueError: If a setting has an invalid value.
            ConfigTypeError: If a setting has an unexpected type.
        """
        cls._validate_api_url(config, "API", "URL")
        cls._validate_project_id(config, "API", "PROJECT_ID")

    @staticmethod
    def _validate_api_url(config: Config, section_name: str, key_name: str) -> None:
        value: Any = getattr(getattr(config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"
        msg: str

        if not isinstance(value, str):
            msg = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)
        try:
            url = URL(value)
        except (TypeError, ValueError) as err:
            msg = f"Invalid URL for '{field_name}': {value}"
            raise ConfigValueError(msg) from err
        if url.scheme not in ("http", "https") or not url.host:
            msg = f"Invalid URL for '{field_name}': '{value}'. An absolute http(s) URL is required."
            raise ConfigValueError(msg)
        if url.scheme == "http":
            logger.warning("'%s' uses plain http; API keys will be sent unencrypted.", field_name)

    @staticmethod
    def _validate_project_id(config: Config, section_name: str, key_name: str) -> None:
        value: Any = getattr(getattr(config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"
        msg: str

        # bool is a subclass of int
        if not isinstance(value, int) or isinstance(value, bool):
            msg = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)
        if value != NO_PROJECT and value <= 0:
            msg = f"Invalid value for '{field_name}': {value}. A positive project id is required."
            raise ConfigValueError(msg)


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, literal)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert an INI value to the Python type of the matching Config field's default.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[type, Callable[[DataclassField[Any], DataclassField[Any]], Any]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], Any] | None = formatters.get(
            type(getattr(getattr(self.config, section.name), key.name))
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for '{section.name}.{key.name}': {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for '{section.name}.{key.name}': {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            return ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for '{section.name}.{key.name}': {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for '{section.name}.{key.name}': {value_str}"
            raise ConfigFormatError(msg) from err

    def _raw(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        value: str = self.parser.get(section.name, key.name).strip()
        for char in ("'", '"'):
            if len(value) >= 2 and value.startswith(char) and value.endswith(char):
                return value[1:-1]
        return value

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        return float(self._raw(section, key))

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        return int(self._raw(section, key))

    def parse_as_string(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        return self._raw(section, key)

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        return self.parser.getboolean(section.name, key.name)
