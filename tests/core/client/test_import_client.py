from __future__ import annotations

from typing import Any

import pytest
from multidict import CIMultiDict, CIMultiDictProxy

from core.client.import_client import ImportClient
from handlers.async_comm import HttpError
from models.request_models import MultipartBody, MultipartFile, NoBody, RequestData


def _http_error(status: int) -> HttpError:
    return HttpError(
        method="DELETE",
        url="https://tms.example.com/v2/projects/1/import",
        status=status,
        reason="",
        headers=CIMultiDictProxy(CIMultiDict()),
        body=b"",
    )


class FakeHttp:
    """Records request descriptors instead of sending them."""

    def __init__(self, *, project_url: str = "/v2/projects/1", error: HttpError | None = None) -> None:
        self.project_url: str = project_url
        self.error: HttpError | None = error
        self.requests: list[tuple[str, RequestData]] = []

    async def request_json(self, req: RequestData) -> Any:
        self.requests.append(("json", req))
        return {"result": {"_embedded": {"languages": []}}}

    async def request_void(self, req: RequestData) -> None:
        self.requests.append(("void", req))
        if self.error is not None:
            raise self.error


@pytest.mark.asyncio
async def test_add_files_posts_multipart() -> None:
    http = FakeHttp()
    files = [MultipartFile(filename="en.json", data="{}")]
    result = await ImportClient(http).add_files(files, {"structureDelimiter": "."})  # type: ignore[arg-type]

    consumer, req = http.requests[0]
    assert consumer == "json"
    assert req.method == "POST"
    assert req.path == "/v2/projects/1/import"
    assert req.body == MultipartBody(files=files, fields={"structureDelimiter": "."})
    assert "result" in result


@pytest.mark.asyncio
async def test_apply_import_passes_force_mode() -> None:
    http = FakeHttp()
    client = ImportClient(http)  # type: ignore[arg-type]
    await client.apply_import("OVERRIDE")
    await client.apply_import()

    assert [req.query for _, req in http.requests] == [{"forceMode": "OVERRIDE"}, {"forceMode": None}]
    assert all(req.method == "PUT" and req.path == "/v2/projects/1/import/apply" for _, req in http.requests)


@pytest.mark.asyncio
async def test_conflict_resolution_paths() -> None:
    http = FakeHttp()
    client = ImportClient(http)  # type: ignore[arg-type]
    await client.conflicts_override_all(11)
    await client.conflicts_keep_existing_all(12)

    paths = [req.path for _, req in http.requests]
    assert paths == [
        "/v2/projects/1/import/result/languages/11/resolve-all/set-override",
        "/v2/projects/1/import/result/languages/12/resolve-all/set-keep-existing",
    ]


@pytest.mark.asyncio
async def test_delete_import() -> None:
    http = FakeHttp()
    await ImportClient(http).delete_import()  # type: ignore[arg-type]

    consumer, req = http.requests[0]
    assert consumer == "void"
    assert (req.method, req.path, req.body) == ("DELETE", "/v2/projects/1/import", NoBody())


@pytest.mark.asyncio
async def test_delete_import_if_exists_ignores_not_found() -> None:
    http = FakeHttp(error=_http_error(404))
    await ImportClient(http).delete_import_if_exists()  # type: ignore[arg-type]
    assert len(http.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 403, 500])
async def test_delete_import_if_exists_propagates_other_errors(status: int) -> None:
    http = FakeHttp(error=_http_error(status))
    with pytest.raises(HttpError) as exc_info:
        await ImportClient(http).delete_import_if_exists()  # type: ignore[arg-type]
    assert exc_info.value.status == status
