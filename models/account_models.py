"""Data models for the account and API-key introspection payloads."""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

__all__: list[str] = ["ApiKeyInfo", "PatInfo", "ProjectInfo", "UserAccount"]


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class UserAccount(DataClassJsonMixin):
    """The account owning the current key."""

    id: int
    username: str
    name: str = ""


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class PatInfo(DataClassJsonMixin):
    """Metadata of a personal access token.

    ``expires_at`` is Unix epoch milliseconds, or None for a token that never expires.
    """

    id: int
    description: str = ""
    expires_at: int | None = None


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class ApiKeyInfo(DataClassJsonMixin):
    """Metadata of a project API key."""

    id: int
    username: str = ""
    project_id: int | None = None
    expires_at: int | None = None
    scopes: list[str] = field(default_factory=list)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class ProjectInfo(DataClassJsonMixin):
    id: int
    name: str
