"""Configuration data models for the project settings file.

Each dataclass mirrors one INI section; field names match the INI keys. The
type of each default value decides how the loader coerces the raw string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from models.credential_models import NO_PROJECT

__all__: list[str] = ["VERSION", "Api", "Config", "General"]

VERSION: Final[str] = "0.1.0"


@dataclass
class General:
    DEBUG: bool = False
    VERSION: str = VERSION
    LOG_FILE: str = ""
    SCRIPT_NAME: str = ""


@dataclass
class Api:
    URL: str = "https://app.tolgee.io"
    PROJECT_ID: int = NO_PROJECT
    API_KEY: str = ""


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    API: Api = field(default_factory=Api)
