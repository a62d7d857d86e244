from __future__ import annotations

import pytest

from core.client.export_client import ExportClient
from models.request_models import JsonBody, RequestData


class FakeHttp:
    def __init__(self) -> None:
        self.project_url: str = "/v2/projects/5"
        self.requests: list[RequestData] = []

    async def request_blob(self, req: RequestData) -> bytes:
        self.requests.append(req)
        return b"PK\x03\x04"


@pytest.mark.asyncio
async def test_export_defaults() -> None:
    http = FakeHttp()
    data = await ExportClient(http).export()  # type: ignore[arg-type]

    assert data == b"PK\x03\x04"
    req = http.requests[0]
    assert req.method == "POST"
    assert req.path == "/v2/projects/5/export"
    assert req.body == JsonBody({"format": "JSON", "zip": True})


@pytest.mark.asyncio
async def test_export_filters_and_options() -> None:
    http = FakeHttp()
    await ExportClient(http).export(  # type: ignore[arg-type]
        format="XLIFF",
        languages=["en", "de"],
        namespaces=["common"],
        zip=False,
        structureDelimiter="",
    )

    assert http.requests[0].body == JsonBody(
        {
            "format": "XLIFF",
            "zip": False,
            "structureDelimiter": "",
            "languages": ["en", "de"],
            "filterNamespace": ["common"],
        }
    )
