from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Final

__all__: list[str] = [
    "AUTH_FILE_ENV",
    "AUTH_FILE_NAME",
    "APP_DIR_NAME",
    "FileMissingError",
    "FileUtils",
    "FileUtilsError",
    "InvalidFileTypeError",
]

APP_DIR_NAME: Final[str] = "tmscli"
AUTH_FILE_NAME: Final[str] = "authentication.json"
AUTH_FILE_ENV: Final[str] = "TMSCLI_AUTH_FILE"


class FileUtils:
    """Path helpers shared by the credential store, the config loader and the CLI."""

    @staticmethod
    def check_file_status(file_path: Path) -> None:
        """Ensure a path names an existing regular file.

        Args:
            file_path (Path): The path to check.

        Raises:
            FileMissingError: If the file does not exist.
            InvalidFileTypeError: If the path is a directory.
        """
        if not file_path.exists():
            msg = f"File does not exist: {file_path}"
            raise FileMissingError(msg)
        if file_path.is_dir():
            msg = f"Invalid file type (directory): {file_path}"
            raise InvalidFileTypeError(msg)

    @staticmethod
    def resolve_path(path: str | Path, *, strict: bool = False) -> Path:
        """Convert a user-input path to an absolute path safely.

        Expands environment variables (e.g., $HOME, %APPDATA%), expands ~ to the home directory,
        and resolves relative paths based on the current working directory.

        Args:
            path (str | Path): The input path (e.g., "~/exports/$PROJECT/en.zip").
            strict (bool): Whether to raise an exception if the path does not exist. Defaults to False.

        Returns:
            Path: The converted absolute `Path` object.
        """
        expanded: str = os.path.expandvars(str(path))
        user_expanded: Path = Path(expanded).expanduser()

        if user_expanded.is_absolute():
            return user_expanded.resolve(strict=strict)
        return (Path.cwd() / user_expanded).resolve(strict=strict)

    @staticmethod
    def config_dir() -> Path:
        """Return the per-user configuration directory for the CLI.

        Windows uses %APPDATA%, macOS uses ~/Library/Application Support, and every
        other platform follows the XDG base directory convention.
        """
        if sys.platform == "win32":
            base: Path = Path(os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming")
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            xdg: str | None = os.environ.get("XDG_CONFIG_HOME")
            base = Path(xdg) if xdg else Path.home() / ".config"
        return base / APP_DIR_NAME

    @staticmethod
    def auth_file() -> Path:
        """Return the credential file path, honoring the ``TMSCLI_AUTH_FILE`` override."""
        override: str | None = os.environ.get(AUTH_FILE_ENV)
        if override:
            return FileUtils.resolve_path(override)
        return FileUtils.config_dir() / AUTH_FILE_NAME


class FileUtilsError(Exception):
    """Custom exception for FileUtils-related errors."""


class FileMissingError(FileUtilsError):
    """Custom exception for file missing errors."""


class InvalidFileTypeError(FileUtilsError):
    """Custom exception for invalid file type errors."""
