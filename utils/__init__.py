"""Utility modules for the translation-management CLI.

This package provides logging setup and file/path helpers.
"""

from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

__all__: list[str] = ["FileUtils", "LoggerUtils"]
