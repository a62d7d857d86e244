"""Asynchronous HTTP executor for the translation-management API.

This module turns ``RequestData`` descriptors into HTTP calls on a shared
aiohttp session. It resolves paths against the API base URL, encodes query
parameters and bodies, attaches the API key and client identification, and
raises ``HttpError`` for any non-2xx response. Three consumers finish a
successful response: JSON decode, raw bytes, or drain-and-discard.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Self, cast

import aiohttp
from aiohttp.client import ClientSession
from multidict import CIMultiDict, MultiDict
from yarl import URL

from models.config_models import VERSION
from models.credential_models import NO_PROJECT
from models.request_models import JsonBody, MultipartBody, NoBody, RequestData
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from aiohttp.client import ClientResponse
    from multidict import CIMultiDictProxy

    from models.request_models import Primitive, QueryValue, RequestBody


__all__: list[str] = ["USER_AGENT", "AsyncCommDecodeError", "AsyncCommError", "AsyncHttp", "HttpError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

USER_AGENT: Final[str] = f"TMS-CLI/{VERSION}"
API_KEY_HEADER: Final[str] = "x-api-key"


def _stringify(value: Primitive) -> str:
    # match the server's expectation of lower-case booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class AsyncHttp:
    """Asynchronous executor bound to one API base URL and one API key.

    The aiohttp session is created lazily on first use (or on ``async with``)
    and must be closed with ``close()`` or by leaving the context.

    Attributes:
        api_url (URL): Base URL every request path is resolved against.
        project_id (int): Project the caller works on, or ``NO_PROJECT``.
    """

    def __init__(self, *, api_url: str | URL, api_key: str, project_id: int = NO_PROJECT) -> None:
        """Initialize the executor.

        Args:
            api_url (str | URL): Base API URL, e.g. ``https://app.tolgee.io``.
            api_key (str): Key sent in the ``x-api-key`` header of every request.
            project_id (int): Project id used to build ``project_url``.
        """
        logger.debug("%s initializing for %s", self.__class__.__name__, api_url)
        self.api_url: URL = URL(api_url) if isinstance(api_url, str) else api_url
        self.project_id: int = project_id
        self.__api_key: str = api_key
        self.__session: ClientSession | None = None

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Create the aiohttp session if there is no open one.

        Args:
            suppress_already_log (bool): If True, do not log when the session is already initialized.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession()
            logger.debug("%s session initialized", self.__class__.__name__)
        elif not suppress_already_log:
            logger.debug("%s session already initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """The open aiohttp session, created on demand."""
        self.initialize_session(suppress_already_log=True)
        return cast("ClientSession", self.__session)

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
            logger.debug("%s session closed", self.__class__.__name__)
        self.__session = None

    @property
    def project_url(self) -> str:
        """Path prefix for project-scoped endpoints."""
        if self.project_id != NO_PROJECT:
            return f"/v2/projects/{self.project_id}"
        return "/v2/projects"

    # -----------------------------------
    # Request building
    # -----------------------------------
    def build_url(self, path: str, query: dict[str, QueryValue] | None = None) -> URL:
        """Resolve a path against the base URL and encode the query parameters.

        Scalars replace any value already present for the key, list values are
        appended once per element in order, and None values are left out.

        Args:
            path (str): Path relative to the API base URL.
            query (dict[str, QueryValue] | None): Query parameters.

        Returns:
            URL: The absolute request URL.
        """
        url: URL = self.api_url.join(URL(path))
        if not query:
            return url

        params: MultiDict[str] = MultiDict(url.query)
        for name, value in query.items():
            if value is None:
                continue
            if isinstance(value, list):
                for item in value:
                    params.add(name, _stringify(item))
            else:
                params[name] = _stringify(value)
        return url.with_query(params)

    def build_headers(self, extra: dict[str, str] | None = None) -> CIMultiDict[str]:
        headers: CIMultiDict[str] = CIMultiDict(extra or {})
        headers[API_KEY_HEADER] = self.__api_key
        headers["user-agent"] = USER_AGENT
        return headers

    @staticmethod
    def build_body(body: RequestBody, headers: CIMultiDict[str]) -> bytes | aiohttp.MultipartWriter | None:
        """Encode a body variant and set the matching content type.

        Args:
            body (RequestBody): The descriptor's body.
            headers (CIMultiDict[str]): Request headers, updated in place.

        Returns:
            bytes | aiohttp.MultipartWriter | None: The payload to send, None for no body.
        """
        match body:
            case NoBody():
                return None
            case MultipartBody(files=files, fields=form_fields):
                writer = aiohttp.MultipartWriter("form-data")
                for name, value in form_fields.items():
                    part = writer.append(value)
                    part.set_content_disposition("form-data", name=name)
                for file in files:
                    data: bytes = file.data.encode("utf-8") if isinstance(file.data, str) else file.data
                    part = writer.append(data, {"Content-Type": "application/octet-stream"})
                    part.set_content_disposition("form-data", name=file.field, filename=file.filename)
                headers["content-type"] = writer.content_type
                return writer
            case JsonBody(value=value):
                headers["content-type"] = "application/json"
                return json.dumps(value).encode("utf-8")

    # -----------------------------------
    # Execution
    # -----------------------------------
    async def execute(self, req: RequestData) -> ClientResponse:
        """Perform one HTTP request and return the successful raw response.

        The caller owns the returned response and must read or release it.
        Transport failures (``aiohttp.ClientError``, ``OSError``, ``TimeoutError``)
        propagate unchanged; there is no retry.

        Args:
            req (RequestData): The request descriptor.

        Returns:
            ClientResponse: The response of a 2xx reply, body unread.

        Raises:
            HttpError: If the server replies with a non-2xx status.
        """
        url: URL = self.build_url(req.path, req.query)
        headers: CIMultiDict[str] = self.build_headers(req.headers)
        data: bytes | aiohttp.MultipartWriter | None = self.build_body(req.body, headers)

        logger.debug("[HTTP] Requesting: %s %s", req.method, url)
        try:
            resp: ClientResponse = await self.session.request(req.method, url, headers=headers, data=data)
        except (aiohttp.ClientError, OSError, TimeoutError) as err:
            logger.debug("[HTTP] %s %s failed: %s", req.method, url, err)
            raise

        logger.debug("[HTTP] %s %s -> %s %s", req.method, url, resp.status, resp.reason)
        if not resp.ok:
            try:
                body: bytes = await resp.read()
            finally:
                resp.release()
            raise HttpError(
                method=req.method,
                url=str(url),
                status=resp.status,
                reason=resp.reason or "",
                headers=resp.headers,
                body=body,
            )
        return resp

    async def request_json(self, req: RequestData) -> Any:
        """Perform a request and decode the response body as JSON.

        Raises:
            HttpError: If the server replies with a non-2xx status.
            AsyncCommDecodeError: If the body is not valid JSON.
        """
        resp: ClientResponse = await self.execute(req)
        try:
            raw: bytes = await resp.read()
        finally:
            resp.release()

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            msg: str = f"Invalid JSON in response to {req.method} {req.path}"
            raise AsyncCommDecodeError(msg) from err

    async def request_blob(self, req: RequestData) -> bytes:
        """Perform a request and return the response body as raw bytes."""
        resp: ClientResponse = await self.execute(req)
        try:
            return await resp.read()
        finally:
            resp.release()

    async def request_void(self, req: RequestData) -> None:
        """Perform a request and consume the response body without keeping it.

        The body is read to the end so the connection can go back to the pool.
        """
        resp: ClientResponse = await self.execute(req)
        try:
            async for _chunk in resp.content.iter_any():
                pass
        finally:
            resp.release()


class AsyncCommError(Exception):
    """Base class for API communication errors."""

    def __init__(self, msg: str | BaseException) -> None:
        self.msg: str = str(msg)
        super().__init__(self.msg)


class HttpError(AsyncCommError):
    """The server answered with a non-2xx status.

    Attributes:
        method (str): HTTP verb of the failed request.
        url (str): Absolute request URL.
        status (int): HTTP status code.
        reason (str): HTTP reason phrase.
        headers (CIMultiDictProxy[str]): Response headers.
        body (bytes): Raw, uninterpreted response body.
    """

    def __init__(
        self,
        *,
        method: str,
        url: str,
        status: int,
        reason: str,
        headers: CIMultiDictProxy[str],
        body: bytes,
    ) -> None:
        self.method: str = method
        self.url: str = url
        self.status: int = status
        self.reason: str = reason
        self.headers: CIMultiDictProxy[str] = headers
        self.body: bytes = body
        super().__init__(f"HTTP {status} {reason}: {method} {url}")


class AsyncCommDecodeError(AsyncCommError):
    """A successful response body could not be decoded into the expected shape."""
