from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Self, TextIO

if TYPE_CHECKING:
    from pathlib import Path

__all__: list[str] = ["LoggerUtils"]

_LOG_FILE_SIZE: Final[int] = 2 * 1024 * 1024  # 2MB
_LOG_BACKUP_COUNT: Final[int] = 2

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_CONSOLE_LEVEL: Final[int] = logging.WARNING
DEFAULT_NAMESPACE: Final[str] = "TMSCli"


class LoggerUtils:
    """Singleton that wires the CLI's loggers to the console and an optional log file.

    Console output goes to stderr and is kept terse (WARNING and above unless
    verbose output is requested). When a log file is given, a rotating file
    handler records everything down to DEBUG with process and location details.

    Attributes:
        _LOGGER_NAMESPACE (str): Namespace every module logger is created under.
        _configured (bool): Whether handlers have been attached already.
        _instance (LoggerUtils | None): The singleton instance.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename: str | Path = "", *, verbose: bool = False, use_null_console: bool = False) -> None:
        """Attach console and file handlers to the namespace logger.

        Calling this again after the first configuration is a no-op.

        Args:
            filename (str | Path): Absolute path of the log file. Empty disables file logging.
            verbose (bool): Emit DEBUG records on the console instead of WARNING and above.
            use_null_console (bool): Discard console output entirely (used when stderr is unavailable).
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        self._use_null_console: bool = bool(use_null_console) or sys.stderr is None
        filename = str(filename)
        # the logger must be at least as permissive as its most verbose handler
        self.root_logger.setLevel(logging.DEBUG if verbose else DEFAULT_LOG_LEVEL)

        self._console_logging(logging.DEBUG if verbose else DEFAULT_CONSOLE_LEVEL)
        if filename.strip():
            self.root_logger.setLevel(logging.DEBUG)
            self._file_logging(filename)

        warnings.showwarning = self.warning_to_log
        LoggerUtils._configured = True

    def warning_to_log(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Route ``warnings.warn`` output into the log (``warnings.showwarning`` signature)."""
        _ = file, line
        self.root_logger.warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    @classmethod
    def reset(cls) -> None:
        """Detach all handlers and forget the singleton so the next construction reconfigures."""
        root_logger: logging.Logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        cls._configured = False
        cls._instance = None

    def _console_logging(self, level: int) -> None:
        if self._use_null_console:
            if self._has_handler(NullHandler):
                self.root_logger.warning("Console logging is already configured.")
                return
            self.root_logger.addHandler(NullHandler())
            return

        if self._has_handler(StreamHandler, exact=True):
            self.root_logger.warning("Console logging is already configured.")
            return

        console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(Formatter("%(message)s"))
        self.root_logger.addHandler(console_handler)

    def _file_logging(self, filename: str) -> None:
        """Configure a UTF-8 rotating log file.

        Args:
            filename (str): Absolute path to the log file.
        """
        if self._has_handler(RotatingFileHandler):
            self.root_logger.warning("File logging is already configured.")
            return

        try:
            file_handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            self.root_logger.error("Incorrect log file name: %s\nLogging to the file is not performed.", filename)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            Formatter("%(asctime)s %(levelname)-8s %(process)5d %(lineno)4d %(name)-38s\t%(funcName)s\t%(message)s")
        )
        self.root_logger.addHandler(file_handler)

    def _has_handler(self, handler_type: type, *, exact: bool = False) -> bool:
        # RotatingFileHandler is itself a StreamHandler subclass
        if exact:
            return any(type(h) is handler_type for h in self.root_logger.handlers)
        return any(isinstance(h, handler_type) for h in self.root_logger.handlers)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Get a logger below the CLI namespace.

        Args:
            name (str | None): Module name, usually ``__name__``. ``None`` returns the namespace logger.

        Returns:
            logging.Logger: The requested logger.
        """
        full_name: str | None
        if LoggerUtils._LOGGER_NAMESPACE:
            full_name = f"{LoggerUtils._LOGGER_NAMESPACE}.{name}" if name else LoggerUtils._LOGGER_NAMESPACE
        else:
            full_name = name or None
        return logging.getLogger(full_name)
