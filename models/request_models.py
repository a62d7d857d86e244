"""Request descriptor models consumed by the HTTP executor.

Endpoint clients describe a call with ``RequestData`` and one of the body
variants below; they never build URLs, headers or encoded payloads themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

__all__: list[str] = [
    "HTTPMethod",
    "JsonBody",
    "MultipartBody",
    "MultipartFile",
    "NoBody",
    "Primitive",
    "QueryValue",
    "RequestBody",
    "RequestData",
]

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

Primitive = str | bool | int | float
QueryValue = Primitive | list[Primitive] | None


@dataclass(frozen=True)
class NoBody:
    """The request carries no payload and no content type."""


@dataclass(frozen=True)
class JsonBody:
    """A JSON-serializable payload."""

    value: Any


@dataclass(frozen=True)
class MultipartFile:
    """One file part of a multipart upload.

    Attributes:
        filename (str): Name reported to the server in the part's content disposition.
        data (bytes | str): File contents. Text is encoded as UTF-8.
        field (str): Form field name the part is sent under.
    """

    filename: str
    data: bytes | str
    field: str = "files"


@dataclass(frozen=True)
class MultipartBody:
    """A ``multipart/form-data`` payload made of file parts and plain fields."""

    files: list[MultipartFile] = field(default_factory=list)
    fields: dict[str, str] = field(default_factory=dict)


RequestBody = NoBody | JsonBody | MultipartBody


@dataclass(frozen=True)
class RequestData:
    """Description of a single API call.

    Attributes:
        method (HTTPMethod): HTTP verb.
        path (str): Path relative to the API base URL, e.g. ``/v2/projects/1/import``.
        query (dict[str, QueryValue]): Query parameters. Lists repeat the key per element; None is omitted.
        body (RequestBody): Payload variant.
        headers (dict[str, str]): Extra request headers.
    """

    method: HTTPMethod
    path: str
    query: dict[str, QueryValue] = field(default_factory=dict)
    body: RequestBody = field(default_factory=NoBody)
    headers: dict[str, str] = field(default_factory=dict)
