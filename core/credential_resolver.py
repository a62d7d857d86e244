"""Credential selection, expiry and replacement policy on top of the store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.credential_models import (
    NO_PROJECT,
    Credential,
    PersonalAccessToken,
    ProjectApiKey,
    instance_key,
    now_ms,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from yarl import URL

    from core.credential_store import CredentialDocument, CredentialStore


__all__: list[str] = ["CredentialResolver"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


def _same_identity(a: Credential, b: Credential) -> bool:
    match a, b:
        case PersonalAccessToken(), PersonalAccessToken():
            return True
        case ProjectApiKey(project=pa), ProjectApiKey(project=pb):
            return pa.id == pb.id
        case _:
            return False


class CredentialResolver:
    """Stores and selects API keys per instance and project.

    Personal access tokens are valid for every project of their instance and
    always win over project keys. Expired credentials are pruned from the store
    the first time a lookup sees them.
    """

    def __init__(self, store: CredentialStore) -> None:
        self.store: CredentialStore = store

    def save_api_key(self, instance: str | URL, credential: Credential) -> None:
        """Store a credential, replacing any stored credential with the same identity.

        A PAT replaces the instance's PAT; a PAK replaces the PAK for the same
        project id. Other credentials of the instance are kept.

        Args:
            instance (str | URL): Any URL on the instance.
            credential (Credential): The credential to store.
        """
        host: str = instance_key(instance)
        document: CredentialDocument = self.store.load()
        credentials: list[Credential] = document.setdefault(host, [])

        kept: list[Credential] = [c for c in credentials if not _same_identity(c, credential)]
        if len(kept) != len(credentials):
            logger.debug("Replacing stored %s for %s", type(credential).__name__, host)
        kept.append(credential)
        document[host] = kept

        self.store.save(document)
        logger.info("Stored %s for %s", type(credential).__name__, host)

    def get_api_key(self, instance: str | URL, project_id: int = NO_PROJECT) -> str | None:
        """Return the best usable key for an instance and project.

        Args:
            instance (str | URL): Any URL on the instance.
            project_id (int): Requested project, or ``NO_PROJECT``.

        Returns:
            str | None: The PAT key if one is valid, else the key of a valid PAK for
            ``project_id``, else None.
        """
        credentials: list[Credential] = self.list_credentials(instance)

        pat_key: str | None = None
        pak_key: str | None = None
        for credential in credentials:
            match credential:
                case PersonalAccessToken(key=key):
                    if pat_key is None:
                        pat_key = key
                case ProjectApiKey(key=key, project=project):
                    if pak_key is None and project_id != NO_PROJECT and project.id == project_id:
                        pak_key = key

        if pat_key is not None:
            return pat_key
        if pak_key is None:
            logger.debug("No stored key for %s (project %s)", instance_key(instance), project_id)
        return pak_key

    def list_credentials(self, instance: str | URL) -> list[Credential]:
        """Return the instance's unexpired credentials, pruning expired ones from the store.

        Args:
            instance (str | URL): Any URL on the instance.

        Returns:
            list[Credential]: Valid credentials in stored order.
        """
        host: str = instance_key(instance)
        document: CredentialDocument = self.store.load()
        credentials: list[Credential] = document.get(host, [])

        now: int = now_ms()
        valid: list[Credential] = [c for c in credentials if not c.is_expired(now)]

        if len(valid) != len(credentials):
            logger.info("Removing %d expired credential(s) for %s", len(credentials) - len(valid), host)
            if valid:
                document[host] = valid
            else:
                del document[host]
            self.store.save(document)

        return valid

    def remove_api_keys(self, instance: str | URL) -> int:
        """Forget every credential stored for an instance.

        Returns:
            int: Number of credentials removed.
        """
        host: str = instance_key(instance)
        document: CredentialDocument = self.store.load()
        removed: list[Credential] = document.pop(host, [])
        if removed:
            self.store.save(document)
        logger.debug("Removed %d credential(s) for %s", len(removed), host)
        return len(removed)

    def clear(self) -> None:
        """Forget every stored credential for every instance."""
        self.store.save({})
        logger.debug("Credential store cleared")
