"""Client for the project export endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.client.base import ClientBase
from models.request_models import JsonBody, RequestData
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["ExportClient"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class ExportClient(ClientBase):
    async def export(
        self,
        *,
        format: str = "JSON",  # noqa: A002
        languages: list[str] | None = None,
        namespaces: list[str] | None = None,
        zip: bool = True,  # noqa: A002
        **options: Any,
    ) -> bytes:
        """Export the project's translations.

        Args:
            format (str): Export format understood by the server, e.g. ``JSON`` or ``XLIFF``.
            languages (list[str] | None): Language tags to export. None exports all languages.
            namespaces (list[str] | None): Namespaces to export. None exports all namespaces.
            zip (bool): Ask for a zip archive even when a single file would result.
            **options: Additional export options passed through in the request body.

        Returns:
            bytes: The exported file or archive.
        """
        body: dict[str, Any] = {"format": format, "zip": zip, **options}
        if languages is not None:
            body["languages"] = languages
        if namespaces is not None:
            body["filterNamespace"] = namespaces

        logger.debug("Requesting %s export", format)
        return await self.http.request_blob(
            RequestData(method="POST", path=f"{self.project_url}/export", body=JsonBody(body))
        )
