from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

import pytest
from multidict import CIMultiDict, CIMultiDictProxy

from core.credential_resolver import CredentialResolver
from core.credential_store import CredentialStore
from core.token_manager import AuthenticationError, TokenManager
from handlers.async_comm import HttpError
from models.credential_models import PersonalAccessToken, ProjectApiKey, ProjectRef

if TYPE_CHECKING:
    from pathlib import Path

    from models.request_models import RequestData

API_URL = "https://tms.example.com"
PAK = "tgpak_gfpw2zlpo4qhk53v"


class FakeHttp:
    """Answers account endpoints from a path-to-payload table."""

    def __init__(self, responses: dict[str, Any], status: int | None = None) -> None:
        self.responses: dict[str, Any] = responses
        self.status: int | None = status
        self.closed: bool = False

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    async def request_json(self, req: RequestData) -> Any:
        if self.status is not None:
            raise HttpError(
                method=req.method,
                url=f"{API_URL}{req.path}",
                status=self.status,
                reason="",
                headers=CIMultiDictProxy(CIMultiDict()),
                body=b'{"code": "invalid_project_api_key"}',
            )
        return self.responses[req.path]


@pytest.fixture
def resolver(tmp_path: Path) -> CredentialResolver:
    return CredentialResolver(CredentialStore(tmp_path / "auth.json"))


def _use_http(monkeypatch: pytest.MonkeyPatch, http: FakeHttp) -> list[tuple[str, str]]:
    calls: list[tuple[str, str]] = []

    def make_http(_self: TokenManager, api_url: str, key: str) -> FakeHttp:
        calls.append((str(api_url), key))
        return http

    monkeypatch.setattr(TokenManager, "_make_http", make_http)
    return calls


@pytest.mark.asyncio
async def test_login_with_pat_stores_credential(monkeypatch: pytest.MonkeyPatch, resolver: CredentialResolver) -> None:
    http = FakeHttp({"/v2/user": {"id": 1, "username": "alice"}, "/v2/pats/current": {"id": 4, "expiresAt": None}})
    calls = _use_http(monkeypatch, http)

    credential = await TokenManager(resolver).login(API_URL, " tgpat_secret \n")

    assert credential == PersonalAccessToken(key="tgpat_secret", username="alice", expires=0)
    assert calls == [(API_URL, "tgpat_secret")]
    assert http.closed is True
    assert resolver.get_api_key(API_URL) == "tgpat_secret"


@pytest.mark.asyncio
async def test_login_with_pak_records_project(monkeypatch: pytest.MonkeyPatch, resolver: CredentialResolver) -> None:
    http = FakeHttp(
        {
            "/v2/api-keys/current": {"id": 9, "projectId": 1, "username": "bob", "expiresAt": 4_102_444_800_000},
            "/v2/projects/1": {"id": 1, "name": "Website"},
        }
    )
    _use_http(monkeypatch, http)

    credential = await TokenManager(resolver).login(API_URL, PAK)

    assert credential == ProjectApiKey(
        key=PAK, username="bob", project=ProjectRef(1, "Website"), expires=4_102_444_800_000
    )
    assert resolver.get_api_key(API_URL, 1) == PAK
    assert resolver.get_api_key(API_URL) is None


@pytest.mark.asyncio
async def test_login_rejects_unknown_prefix(monkeypatch: pytest.MonkeyPatch, resolver: CredentialResolver) -> None:
    calls = _use_http(monkeypatch, FakeHttp({}))
    with pytest.raises(AuthenticationError):
        await TokenManager(resolver).login(API_URL, "not-a-key")
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_login_rejected_key(monkeypatch: pytest.MonkeyPatch, resolver: CredentialResolver, status: int) -> None:
    _use_http(monkeypatch, FakeHttp({}, status=status))
    with pytest.raises(AuthenticationError) as exc_info:
        await TokenManager(resolver).login(API_URL, PAK)
    assert isinstance(exc_info.value.__cause__, HttpError)
    assert resolver.list_credentials(API_URL) == []


@pytest.mark.asyncio
async def test_login_server_error_propagates(monkeypatch: pytest.MonkeyPatch, resolver: CredentialResolver) -> None:
    _use_http(monkeypatch, FakeHttp({}, status=500))
    with pytest.raises(HttpError):
        await TokenManager(resolver).login(API_URL, "tgpat_secret")


@pytest.mark.asyncio
async def test_login_pak_without_project_id(monkeypatch: pytest.MonkeyPatch, resolver: CredentialResolver) -> None:
    _use_http(monkeypatch, FakeHttp({"/v2/api-keys/current": {"id": 9, "username": "bob"}}))
    with pytest.raises(AuthenticationError):
        await TokenManager(resolver).login(API_URL, PAK)


def test_logout_instance_and_all(resolver: CredentialResolver) -> None:
    resolver.save_api_key(API_URL, PersonalAccessToken(key="tgpat_a", username="a"))
    resolver.save_api_key("https://other.example.com", PersonalAccessToken(key="tgpat_b", username="b"))
    manager = TokenManager(resolver)

    assert manager.logout(API_URL) == 1
    assert resolver.get_api_key(API_URL) is None
    assert resolver.get_api_key("https://other.example.com") == "tgpat_b"

    assert manager.logout(API_URL, all_instances=True) == -1
    assert resolver.get_api_key("https://other.example.com") is None


def test_resolve_key_prefers_explicit_key(resolver: CredentialResolver) -> None:
    resolver.save_api_key(API_URL, PersonalAccessToken(key="tgpat_a", username="a"))
    manager = TokenManager(resolver)
    assert manager.resolve_key(API_URL, 1, "tgpak_explicit") == "tgpak_explicit"
    assert manager.resolve_key(API_URL, 1) == "tgpat_a"


def test_resolve_key_without_credentials(resolver: CredentialResolver) -> None:
    with pytest.raises(AuthenticationError, match="login"):
        TokenManager(resolver).resolve_key(API_URL, 3)


def test_stored_project_ids_lists_valid_project_keys(resolver: CredentialResolver) -> None:
    resolver.save_api_key(API_URL, PersonalAccessToken(key="tgpat_a", username="a"))
    resolver.save_api_key(API_URL, ProjectApiKey(key="tgpak_a", username="a", project=ProjectRef(4, "Docs")))
    resolver.save_api_key(API_URL, ProjectApiKey(key="tgpak_b", username="a", project=ProjectRef(9, "App")))
    resolver.save_api_key(API_URL, ProjectApiKey(key="tgpak_c", username="a", project=ProjectRef(2, "Old"), expires=1))
    assert TokenManager(resolver).stored_project_ids(API_URL) == [4, 9]
