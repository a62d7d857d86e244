"""Credential data models.

A stored credential is either a personal access token, valid for every project
on an instance, or a project API key bound to exactly one project. The two are
modeled as separate frozen dataclasses joined in the ``Credential`` union so
that selection code has to match on the concrete type.
"""

from __future__ import annotations

import base64
import binascii
import time
from dataclasses import dataclass
from typing import Any, Final

from yarl import URL

__all__: list[str] = [
    "NO_PROJECT",
    "PAK_PREFIX",
    "PAT_PREFIX",
    "Credential",
    "CredentialFormatError",
    "PersonalAccessToken",
    "ProjectApiKey",
    "ProjectRef",
    "credential_from_dict",
    "credential_to_dict",
    "instance_key",
    "now_ms",
    "project_id_from_key",
]

NO_PROJECT: Final[int] = -1

PAT_PREFIX: Final[str] = "tgpat_"
PAK_PREFIX: Final[str] = "tgpak_"


class CredentialFormatError(ValueError):
    """A stored credential object is malformed."""


@dataclass(frozen=True)
class ProjectRef:
    id: int
    name: str = ""


@dataclass(frozen=True)
class PersonalAccessToken:
    """Instance-wide personal access token.

    Attributes:
        key (str): The secret sent in the ``x-api-key`` header.
        username (str): Owner of the token, for display only.
        expires (int): Expiry as Unix epoch milliseconds; 0 means it never expires.
    """

    key: str
    username: str
    expires: int = 0

    def is_expired(self, now: int | None = None) -> bool:
        return _is_expired(self.expires, now)


@dataclass(frozen=True)
class ProjectApiKey:
    """API key scoped to a single project.

    Attributes:
        key (str): The secret sent in the ``x-api-key`` header.
        username (str): Owner of the key, for display only.
        project (ProjectRef): The project the key grants access to.
        expires (int): Expiry as Unix epoch milliseconds; 0 means it never expires.
    """

    key: str
    username: str
    project: ProjectRef
    expires: int = 0

    def is_expired(self, now: int | None = None) -> bool:
        return _is_expired(self.expires, now)


Credential = PersonalAccessToken | ProjectApiKey


def now_ms() -> int:
    return int(time.time() * 1000)


def _is_expired(expires: int, now: int | None) -> bool:
    if expires == 0:
        return False
    return expires < (now_ms() if now is None else now)


def instance_key(api_url: str | URL) -> str:
    """Normalize an API URL to the origin used as the store key.

    Args:
        api_url (str | URL): Any URL on the instance, e.g. ``https://tms.example.com/api``.

    Returns:
        str: Scheme and host (plus a non-default port), e.g. ``https://tms.example.com``.

    Raises:
        ValueError: If the URL is not absolute.
    """
    url = URL(api_url) if isinstance(api_url, str) else api_url
    if not url.is_absolute():
        msg: str = f"Instance URL must be absolute: '{api_url}'"
        raise ValueError(msg)
    return str(url.origin())


def credential_to_dict(credential: Credential) -> dict[str, Any]:
    """Serialize a credential to its persisted JSON object form."""
    match credential:
        case PersonalAccessToken(key=key, username=username, expires=expires):
            return {"type": "PAT", "key": key, "username": username, "expires": expires}
        case ProjectApiKey(key=key, username=username, project=project, expires=expires):
            return {
                "type": "PAK",
                "key": key,
                "username": username,
                "project": {"id": project.id, "name": project.name},
                "expires": expires,
            }


def _field(data: dict[str, Any], name: str, kind: type, default: Any = None) -> Any:
    if name not in data and default is not None:
        return default
    value: Any = data.get(name)
    # bool is a subclass of int and must not pass as a number
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        msg: str = f"Field '{name}' must be {kind.__name__}, got {type(value).__name__}"
        raise CredentialFormatError(msg)
    return value


def credential_from_dict(data: dict[str, Any]) -> Credential:
    """Parse a persisted credential object.

    Fields are checked, not coerced: ``key`` and ``username`` must be strings,
    ``expires`` and the project id integers. ``username`` and ``expires`` may be
    left out; ``null`` is rejected everywhere.

    Args:
        data (dict[str, Any]): One entry of an instance's credential list.

    Returns:
        Credential: The matching credential variant.

    Raises:
        CredentialFormatError: If the ``type`` discriminator is unknown or a field is missing or mistyped.
    """
    msg: str
    if not isinstance(data, dict):
        msg = f"Credential entry must be an object, got {type(data).__name__}"
        raise CredentialFormatError(msg)

    kind: Any = data.get("type")
    if kind not in ("PAT", "PAK"):
        msg = f"Unknown credential type: {kind!r}"
        raise CredentialFormatError(msg)

    try:
        key: str = _field(data, "key", str)
        username: str = _field(data, "username", str, "")
        expires: int = _field(data, "expires", int, 0)
        if kind == "PAT":
            return PersonalAccessToken(key=key, username=username, expires=expires)

        project: dict[str, Any] = _field(data, "project", dict)
        ref = ProjectRef(id=_field(project, "id", int), name=_field(project, "name", str, ""))
    except CredentialFormatError as err:
        msg = f"Malformed {kind} entry: {err}"
        raise CredentialFormatError(msg) from err
    return ProjectApiKey(key=key, username=username, project=ref, expires=expires)


def project_id_from_key(key: str) -> int | None:
    """Extract the project id embedded in a project API key.

    The part after the ``tgpak_`` prefix is the unpadded, lower-case base32
    encoding of ``"<project id>_<secret>"``.

    Returns:
        int | None: The project id, or None for personal tokens and undecodable keys.
    """
    if not key.startswith(PAK_PREFIX):
        return None

    encoded: str = key.removeprefix(PAK_PREFIX).upper()
    encoded += "=" * (-len(encoded) % 8)
    try:
        decoded: str = base64.b32decode(encoded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    head, sep, _ = decoded.partition("_")
    if not sep or not head.isdigit():
        return None
    return int(head)
