"""Client for the project import endpoints.

An import is staged server side: files are uploaded, conflicts may be
resolved per language, and the import is then applied or deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from core.client.base import ClientBase
from handlers.async_comm import HttpError
from models.request_models import MultipartBody, MultipartFile, RequestData
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["ForceMode", "ImportClient"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ForceMode = Literal["OVERRIDE", "KEEP", "NO_FORCE"]


class ImportClient(ClientBase):
    async def add_files(self, files: list[MultipartFile], params: dict[str, str] | None = None) -> Any:
        """Upload files into the project's pending import.

        Args:
            files (list[MultipartFile]): Files to upload, each sent under the ``files`` field.
            params (dict[str, str] | None): Extra form fields accepted by the import endpoint.

        Returns:
            Any: The decoded import result describing the staged languages.
        """
        logger.debug("Uploading %d file(s) for import", len(files))
        return await self.http.request_json(
            RequestData(
                method="POST",
                path=f"{self.project_url}/import",
                body=MultipartBody(files=files, fields=dict(params or {})),
            )
        )

    async def conflicts_override_all(self, language_id: int) -> None:
        await self.http.request_void(
            RequestData(
                method="PUT",
                path=f"{self.project_url}/import/result/languages/{language_id}/resolve-all/set-override",
            )
        )

    async def conflicts_keep_existing_all(self, language_id: int) -> None:
        await self.http.request_void(
            RequestData(
                method="PUT",
                path=f"{self.project_url}/import/result/languages/{language_id}/resolve-all/set-keep-existing",
            )
        )

    async def apply_import(self, force_mode: ForceMode | None = None) -> None:
        await self.http.request_void(
            RequestData(
                method="PUT",
                path=f"{self.project_url}/import/apply",
                query={"forceMode": force_mode},
            )
        )

    async def delete_import(self) -> None:
        await self.http.request_void(RequestData(method="DELETE", path=f"{self.project_url}/import"))

    # -----------------------------------
    # Helpers
    # -----------------------------------
    async def delete_import_if_exists(self) -> None:
        """Delete the pending import, treating a missing import as already deleted."""
        try:
            await self.delete_import()
        except HttpError as err:
            if err.status == 404:
                logger.debug("No pending import to delete")
                return
            raise
