import logging
import os
import sys
from typing import Optional

# Custom levels used by the pipeline
PROGRESS_LEVEL = 22
SUCCESS_LEVEL = 25
NOTICE_LEVEL = 35
FAILURE_LEVEL = 45

logging.addLevelName(PROGRESS_LEVEL, "PROGRESS")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")
logging.addLevelName(NOTICE_LEVEL, "NOTICE")
logging.addLevelName(FAILURE_LEVEL, "FAILURE")


def _color_disabled_by_env() -> bool:
    """Honor the NO_COLOR convention (https://no-color.org)."""
    return bool(os.environ.get("NO_COLOR"))


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps each record in an ANSI color for its level."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "PROGRESS": "\033[94m",  # Bright Blue
        "SUCCESS": "\033[92m",  # Bright Green
        "WARNING": "\033[33m",  # Yellow
        "NOTICE": "\033[96m",  # Bright Cyan
        "ERROR": "\033[31m",  # Red
        "FAILURE": "\033[91m",  # Bright Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(
        self, fmt: str = None, datefmt: str = None, use_color: bool = True
    ):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        if self.use_color and sys.stderr.isatty() and not _color_disabled_by_env():
            level_color = self.COLORS.get(record.levelname, "")
            return f"{level_color}{message}{self.COLORS['RESET']}"

        return message


def setup_colored_logging(level: int = logging.INFO, use_color: bool = True) -> None:
    """
    Configure the root logger with a single colored console handler.

    Args:
        level: Logging level (default: logging.INFO)
        use_color: Set to False to force plain output even on a terminal
    """
    formatter = ColoredFormatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
        use_color=use_color,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop handlers from a previous call so lines are not printed twice
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def level_from_name(name: Optional[str], default: int = logging.INFO) -> int:
    """Translate a level name such as "debug" or "PROGRESS" into its number."""
    if not name:
        return default
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else default


class EnhancedLogger:
    """Logger wrapper exposing the custom pipeline levels as methods."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def progress(self, msg, *args, **kwargs):
        """Stage transitions and counters."""
        self._logger.log(PROGRESS_LEVEL, msg, *args, **kwargs)

    def success(self, msg, *args, **kwargs):
        """One item or stage finished cleanly."""
        self._logger.log(SUCCESS_LEVEL, msg, *args, **kwargs)

    def notice(self, msg, *args, **kwargs):
        """Something the operator should read, not an error."""
        self._logger.log(NOTICE_LEVEL, msg, *args, **kwargs)

    def failure(self, msg, *args, **kwargs):
        """An item operation failed and was skipped."""
        self._logger.log(FAILURE_LEVEL, msg, *args, **kwargs)

    def __getattr__(self, name):
        return getattr(self._logger, name)


def get_colored_logger(name: str) -> EnhancedLogger:
    """
    Get an enhanced logger with the custom level methods.

    Args:
        name: Logger name (typically __name__)

    Returns:
        EnhancedLogger wrapping logging.getLogger(name)
    """
    return EnhancedLogger(logging.getLogger(name))
