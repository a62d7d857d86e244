"""Credential storage implementation using a single JSON document.

The document maps each instance origin to the list of credentials stored for
it. This module performs no policy: it reads and writes whole documents and
leaves selection, expiry and de-duplication to the resolver.
"""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from models.credential_models import Credential, CredentialFormatError, credential_from_dict, credential_to_dict
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging


__all__: list[str] = ["CredentialDocument", "CredentialStore", "CredentialStoreError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

CredentialDocument = dict[str, list[Credential]]


class CredentialStoreError(Exception):
    """The credential file exists but cannot be read or written."""


class CredentialStore:
    """JSON-file storage for API credentials.

    Attributes:
        path (Path): Location of the credential document.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            path (str | Path | None): Credential file. Defaults to the per-user authentication file.

        Raises:
            RuntimeError: If the given path is empty.
        """
        if path is None:
            path = FileUtils.auth_file()
        elif str(path).strip() == "":
            msg: str = "The credential file path is empty."
            raise RuntimeError(msg)

        self.path: Path = Path(path)
        logger.debug("Credential file set to: %s", self.path)

    def load(self) -> CredentialDocument:
        """Read the persisted document.

        Returns:
            CredentialDocument: Instance origin to credentials, or an empty mapping when no file exists yet.

        Raises:
            CredentialStoreError: If the file is unreadable or not a JSON object of credential arrays.
        """
        try:
            raw: str = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No credential file at %s", self.path)
            return {}
        except OSError as err:
            msg: str = f"Failed to read credential file '{self.path}': {err}"
            raise CredentialStoreError(msg) from err

        if not raw.strip():
            return {}

        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as err:
            msg = f"Credential file '{self.path}' is not valid JSON: {err}"
            raise CredentialStoreError(msg) from err

        if not isinstance(data, dict):
            msg = f"Credential file '{self.path}' must contain a JSON object"
            raise CredentialStoreError(msg)

        document: CredentialDocument = {}
        for instance, entries in data.items():
            if not isinstance(entries, list):
                msg = f"Credentials for '{instance}' must be a list"
                raise CredentialStoreError(msg)
            try:
                document[instance] = [credential_from_dict(entry) for entry in entries]
            except CredentialFormatError as err:
                msg = f"Invalid credential for '{instance}' in '{self.path}': {err}"
                raise CredentialStoreError(msg) from err

        logger.debug("Loaded credentials for %d instance(s)", len(document))
        return document

    def save(self, document: CredentialDocument) -> None:
        """Atomically replace the persisted document.

        The document is written to a temporary file next to the target and then
        renamed over it, so readers never observe a partially written file.

        Args:
            document (CredentialDocument): The complete desired state.

        Raises:
            CredentialStoreError: If the file cannot be written.
        """
        serialized: dict[str, list[dict[str, Any]]] = {
            instance: [credential_to_dict(credential) for credential in credentials]
            for instance, credentials in document.items()
        }

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(serialized, tmp, indent=2)
                tmp.write("\n")
            # owner read/write only (skip on Windows)
            if os.name != "nt":
                Path(tmp_name).chmod(stat.S_IRUSR | stat.S_IWUSR)
            Path(tmp_name).replace(self.path)
        except OSError as err:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            msg: str = f"Failed to write credential file '{self.path}': {err}"
            raise CredentialStoreError(msg) from err

        logger.debug("Saved credentials for %d instance(s)", len(document))
