from __future__ import annotations

from typing import TYPE_CHECKING

from core.client.account_client import AccountClient
from handlers.async_comm import AsyncHttp, HttpError
from models.credential_models import (
    NO_PROJECT,
    PAK_PREFIX,
    PAT_PREFIX,
    Credential,
    PersonalAccessToken,
    ProjectApiKey,
    ProjectRef,
    instance_key,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from yarl import URL

    from core.credential_resolver import CredentialResolver
    from models.account_models import ApiKeyInfo, PatInfo, ProjectInfo, UserAccount


__all__: list[str] = ["AuthenticationError", "TokenManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class AuthenticationError(Exception):
    """An API key is unusable: unknown format, rejected by the server, or missing."""


def _expires(value: int | None) -> int:
    # the server reports a missing expiry as null
    return int(value) if value else 0


class TokenManager:
    """Login, logout and key lookup on top of the credential resolver.

    Login asks the server who owns a key and until when it is valid, then
    stores the resulting credential.

    Attributes:
        resolver (CredentialResolver): Policy layer over the credential store.
    """

    def __init__(self, resolver: CredentialResolver) -> None:
        logger.debug("Initializing %s", self.__class__.__name__)
        self.resolver: CredentialResolver = resolver

    # -----------------------------------
    # Login
    # -----------------------------------
    def _make_http(self, api_url: str | URL, key: str) -> AsyncHttp:
        return AsyncHttp(api_url=api_url, api_key=key)

    async def _describe_pat(self, account: AccountClient, key: str) -> PersonalAccessToken:
        user: UserAccount = await account.get_user()
        info: PatInfo = await account.get_pat_info()
        return PersonalAccessToken(key=key, username=user.username or "", expires=_expires(info.expires_at))

    async def _describe_pak(self, account: AccountClient, key: str) -> ProjectApiKey:
        info: ApiKeyInfo = await account.get_pak_info()
        project_id: int | None = info.project_id
        if not isinstance(project_id, int):
            msg: str = "The server did not report which project the API key belongs to."
            raise AuthenticationError(msg)

        project: ProjectInfo = await account.get_project(project_id)
        return ProjectApiKey(
            key=key,
            username=info.username or "",
            project=ProjectRef(id=project_id, name=project.name or ""),
            expires=_expires(info.expires_at),
        )

    async def login(self, api_url: str | URL, key: str) -> Credential:
        """Validate a key against the server and store it for the instance.

        Args:
            api_url (str | URL): Base API URL of the instance.
            key (str): A personal access token (``tgpat_``) or project API key (``tgpak_``).

        Returns:
            Credential: The stored credential.

        Raises:
            AuthenticationError: If the key format is unknown or the server rejects the key.
            HttpError: For any other non-2xx reply.
        """
        key = key.strip()
        if not key.startswith((PAT_PREFIX, PAK_PREFIX)):
            msg: str = f"Unrecognized API key format; expected a key starting with '{PAT_PREFIX}' or '{PAK_PREFIX}'."
            raise AuthenticationError(msg)

        logger.info("Validating API key against %s", instance_key(api_url))
        async with self._make_http(api_url, key) as http:
            account = AccountClient(http)
            try:
                credential: Credential
                if key.startswith(PAT_PREFIX):
                    credential = await self._describe_pat(account, key)
                else:
                    credential = await self._describe_pak(account, key)
            except HttpError as err:
                if err.status in (401, 403):
                    msg = "The API key was rejected by the server. It may be invalid, revoked or expired."
                    raise AuthenticationError(msg) from err
                raise

        self.resolver.save_api_key(api_url, credential)
        return credential

    # -----------------------------------
    # Logout / lookup
    # -----------------------------------
    def logout(self, api_url: str | URL, *, all_instances: bool = False) -> int:
        """Forget stored keys.

        Args:
            api_url (str | URL): Base API URL of the instance whose keys are forgotten.
            all_instances (bool): Forget every stored key of every instance instead.

        Returns:
            int: Number of credentials removed, or -1 when the whole store was cleared.
        """
        if all_instances:
            self.resolver.clear()
            return -1
        return self.resolver.remove_api_keys(api_url)

    def stored_project_ids(self, api_url: str | URL) -> list[int]:
        """Return the projects of the instance's valid project API keys, in stored order."""
        return [c.project.id for c in self.resolver.list_credentials(api_url) if isinstance(c, ProjectApiKey)]

    def resolve_key(self, api_url: str | URL, project_id: int = NO_PROJECT, explicit_key: str | None = None) -> str:
        """Pick the key to use for a command.

        An explicitly supplied key always wins; otherwise the stored credentials decide.

        Raises:
            AuthenticationError: If no usable key is available.
        """
        if explicit_key:
            return explicit_key

        key: str | None = self.resolver.get_api_key(api_url, project_id)
        if key is None:
            msg: str = f"No API key stored for {instance_key(api_url)}. Run 'tmscli login <API_KEY>' first."
            raise AuthenticationError(msg)
        return key
