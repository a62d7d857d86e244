"""Client for the endpoints describing the current user and API key."""

from __future__ import annotations

from typing import Any

from core.client.base import ClientBase
from handlers.async_comm import AsyncCommDecodeError
from models.account_models import ApiKeyInfo, PatInfo, ProjectInfo, UserAccount
from models.request_models import RequestData

__all__: list[str] = ["AccountClient"]


def _expect_object(response: Any, path: str) -> dict[str, Any]:
    if not isinstance(response, dict):
        msg: str = f"Expected a JSON object from {path}, got {type(response).__name__}"
        raise AsyncCommDecodeError(msg)
    return response


class AccountClient(ClientBase):
    async def _get(self, path: str) -> dict[str, Any]:
        return _expect_object(await self.http.request_json(RequestData(method="GET", path=path)), path)

    async def get_user(self) -> UserAccount:
        return UserAccount.from_dict(await self._get("/v2/user"), infer_missing=True)

    async def get_pat_info(self) -> PatInfo:
        """Fetch metadata of the personal access token used for the request."""
        return PatInfo.from_dict(await self._get("/v2/pats/current"), infer_missing=True)

    async def get_pak_info(self) -> ApiKeyInfo:
        """Fetch metadata of the project API key used for the request."""
        return ApiKeyInfo.from_dict(await self._get("/v2/api-keys/current"), infer_missing=True)

    async def get_project(self, project_id: int) -> ProjectInfo:
        return ProjectInfo.from_dict(await self._get(f"/v2/projects/{project_id}"), infer_missing=True)
