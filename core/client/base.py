"""Shared base for endpoint-specific API clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from handlers.async_comm import AsyncHttp

__all__: list[str] = ["ClientBase"]


class ClientBase:
    """Base class for clients that describe API calls and hand them to the executor.

    Subclasses only declare ``RequestData``; URL resolution, headers and body
    encoding are the executor's job.

    Attributes:
        http (AsyncHttp): Executor bound to the instance URL and API key.
    """

    def __init__(self, http: AsyncHttp) -> None:
        self.http: AsyncHttp = http

    @property
    def project_url(self) -> str:
        return self.http.project_url
