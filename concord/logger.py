"""
Concord Logging
===============

Process-wide logging for the governance engine. Console output goes through
a `rich` handler that colours proposal numbers, addresses and lifecycle
states; file output goes to a size-rotated log under `logs/`.

Usage:
    >>> from concord.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Proposal #1: CREATED → VERIFIED")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
)


PROJECT_ROOT = Path(__file__).parent.parent
LOG_FILE_PATH = PROJECT_ROOT / "logs" / "concord.log"

_THEME = Theme(
    {
        "concord.address":        "cyan",
        "concord.arrow":          "bold yellow",
        "concord.level_critical": "bold red reverse",
        "concord.level_debug":    "bold dim",
        "concord.level_error":    "bold red",
        "concord.level_info":     "bold green",
        "concord.level_warning":  "bold yellow",
        "concord.logger_name":    "magenta",
        "concord.proposal":       "bold magenta",
        "concord.state_bad":      "bold red",
        "concord.state_good":     "bold green",
        "concord.state_wait":     "bold cyan",
        "concord.timestamp":      "bold cyan",
    }
)


class LogManager:
    """
    Singleton owner of the root logger's handlers.

    Handlers are installed on the first `configure` call; later calls are
    ignored until `reset` is called, which is how the [logging] config
    section re-applies itself at startup.
    """

    _instance: Optional["LogManager"] = None
    _lock: threading.Lock = threading.Lock()


    def __new__(cls) -> "LogManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance


    def __init__(self) -> None:
        if self._initialized:
            return
        self._configured = False
        self._initialized = True


    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """
        Return *log_format* if it renders a sample record cleanly, else the
        default format from constants.
        """
        try:
            if not log_format:
                return str(LOG_FORMAT.default())

            log_format = str(log_format)
            sample = logging.LogRecord(
                name="concord", level=logging.INFO, pathname="", lineno=0,
                msg="sample", args=(), exc_info=None,
            )
            rendered = logging.Formatter(fmt=log_format).format(sample)

            # A leftover %(name)x means the record never filled it in
            if re.search(r"%\([a-zA-Z_][a-zA-Z0-9_]*\)[a-zA-Z]", rendered):
                raise ValueError("Format specifiers not properly processed.")

            return log_format
        except (ValueError, KeyError, TypeError) as e:
            print(
                f"{time.strftime('%Y-%m-%d %H:%M:%S')} - concord.logger - "
                f"Bad LOG_FORMAT ({e}), falling back to the default.",
                file=sys.stderr,
            )
            return str(LOG_FORMAT.default())


    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Install console and file handlers on the root logger.

        Args:
            log_level: Level name; falls back to LOG_LEVEL from .env.
            log_file: Rotating log path; defaults to `logs/concord.log`.
            console_output: Attach the console handler.
            file_output: Attach the file handler; falls back to LOG_FILE_OUTPUT.
        """
        with self._lock:
            if self._configured:
                return

            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            root = logging.getLogger()
            root.setLevel(level)
            root.handlers.clear()

            date_format = str(LOG_DATE_FORMAT) or str(LOG_DATE_FORMAT.default())
            formatter = TerminalSafeFormatter(
                fmt=self.validate_log_format(LOG_FORMAT), datefmt=date_format + " UTC",
            )
            formatter.converter = time.gmtime

            handlers = []
            if console_output:
                handlers.append(self._console_handler())
            if file_output is None:
                file_output = bool(LOG_FILE_OUTPUT)
            if file_output:
                handlers.append(self._file_handler(log_file or LOG_FILE_PATH))

            for handler in handlers:
                handler.setLevel(level)
                handler.setFormatter(formatter)
                root.addHandler(handler)

            self._configured = True


    @staticmethod
    def _console_handler() -> logging.Handler:
        if not LOG_CONSOLE_HIGHLIGHTING:
            return logging.StreamHandler(sys.stdout)
        return RichHandler(
            console=Console(theme=_THEME, highlight=False),
            highlighter=GovernanceLogHighlighter(),
            keywords=[],
            rich_tracebacks=True,
            omit_repeated_times=False,
            show_path=False,
            show_time=False,
            show_level=False,
            markup=False,
        )


    @staticmethod
    def _file_handler(path: Path) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=LOG_MAX_FILE_SIZE,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )


    def reset(self) -> None:
        """Allows a later `configure` call to rebuild the handlers."""
        with self._lock:
            self._configured = False


    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


    @property
    def is_configured(self) -> bool:
        return self._configured


class TerminalSafeFormatter(logging.Formatter):
    """
    Strips ANSI escapes and control characters from every formatted record.

    Proposal descriptions and action signatures are user supplied and end
    up in log lines verbatim.
    """

    # CSI sequences and two-byte ESC sequences
    _ansi_escape_re = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"
        r"|\x1b[@-Z\\-_]"
    )
    # C0 controls and DEL, keeping tab and newline
    _control_chars_re = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
    _carriage_return_re = re.compile(r"\r")


    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        for pattern in (cls._ansi_escape_re, cls._carriage_return_re, cls._control_chars_re):
            text = pattern.sub("", text)
        return text


    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class GovernanceLogHighlighter(RegexHighlighter):
    """Proposal numbers, addresses, lifecycle states and transition arrows."""

    base_style = "concord."
    highlights = [
        r"(?P<arrow>→|->)",
        r"(?P<address>\b0x[0-9a-fA-F]{40}\b)",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<proposal>#\d+)",
        r"(?P<state_good>\b(SUCCEEDED|EXECUTED|VERIFIED)\b)",
        r"(?P<state_bad>\b(DEFEATED|CANCELED|VETOED|EXPIRED)\b)",
        r"(?P<state_wait>\b(CREATED|PENDING|ACTIVE|QUEUED)\b)",
        r"(?P<timestamp>^(.*?)UTC)",
    ]


_manager = LogManager()

def get_logger(name: str) -> logging.Logger:
    """Module-level logger accessor; configures logging on first use."""
    return _manager.get_logger(name)
