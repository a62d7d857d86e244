"""Core services of the translation-management CLI.

This package contains credential storage and selection, login/logout handling
and the endpoint clients built on top of the HTTP executor.
"""

from core.credential_resolver import CredentialResolver
from core.credential_store import CredentialStore, CredentialStoreError
from core.token_manager import AuthenticationError, TokenManager

__all__: list[str] = [
    "AuthenticationError",
    "CredentialResolver",
    "CredentialStore",
    "CredentialStoreError",
    "TokenManager",
]
