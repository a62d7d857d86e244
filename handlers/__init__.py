"""HTTP communication with the translation-management API.

This package provides the asynchronous request executor and the errors it raises.
"""

from handlers.async_comm import USER_AGENT, AsyncCommDecodeError, AsyncCommError, AsyncHttp, HttpError

__all__: list[str] = [
    "USER_AGENT",
    "AsyncCommDecodeError",
    "AsyncCommError",
    "AsyncHttp",
    "HttpError",
]
