"""Data models for the translation-management CLI.

This package contains dataclass definitions for configuration, stored credentials,
account payloads and the request descriptors handed to the HTTP executor.
"""

from __future__ import annotations

from models.account_models import ApiKeyInfo, PatInfo, ProjectInfo, UserAccount
from models.config_models import VERSION, Api, Config, General
from models.credential_models import (
    NO_PROJECT,
    Credential,
    CredentialFormatError,
    PersonalAccessToken,
    ProjectApiKey,
    ProjectRef,
)
from models.request_models import (
    JsonBody,
    MultipartBody,
    MultipartFile,
    NoBody,
    RequestBody,
    RequestData,
)

__all__: list[str] = [
    "NO_PROJECT",
    "VERSION",
    "Api",
    "ApiKeyInfo",
    "Config",
    "Credential",
    "CredentialFormatError",
    "General",
    "JsonBody",
    "MultipartBody",
    "MultipartFile",
    "NoBody",
    "PatInfo",
    "PersonalAccessToken",
    "ProjectApiKey",
    "ProjectInfo",
    "ProjectRef",
    "RequestBody",
    "RequestData",
    "UserAccount",
]
