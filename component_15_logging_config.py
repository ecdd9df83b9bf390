"""
component_15_logging_config.py

Central logging system for numcore.
Provides structured logging with log levels and a uniform format.

Features:
- Console and file based logging (opt-in via setup_logging)
- Standard log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- Structured formatting with timestamps and component names
- Performance tracking for slow paths (Karatsuba, radix conversion)
- Contextual log information via ``extra``

numcore is a library: importing this module only attaches a NullHandler to
the ``numcore`` logger namespace. Applications call setup_logging() to get
console and file output.

Usage:
    from component_15_logging_config import get_logger

    logger = get_logger(__name__)
    logger.debug("Karatsuba split", extra={"words": 64})
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type

ROOT_LOGGER_NAME: str = "numcore"
PERFORMANCE_LOGGER_NAME: str = f"{ROOT_LOGGER_NAME}.performance"

CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG


class NumcoreLogFormatter(logging.Formatter):
    """
    Formatter for structured log output.
    Adds colors for console output (optional).
    """

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        self.use_colors: bool = use_colors
        self.include_extra: bool = include_extra

        # Format: [TIMESTAMP] [LEVEL] [COMPONENT] MESSAGE
        fmt = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_message = super().format(record)

        if self.include_extra and hasattr(record, "extra_info"):
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_info.items())
            log_message += f" | {extra_str}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            log_message = f"{color}{log_message}{reset}"

        return log_message


class PerformanceLogger:
    """
    Context manager for timing slow paths.

    Usage:
        with PerformanceLogger(logger.logger, "karatsuba", words=512):
            product = multiply_karatsuba(a, b)
    """

    def __init__(
        self, logger: logging.Logger, operation_name: str, **context: Any
    ) -> None:
        self.logger: logging.Logger = logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now()
        self.logger.debug(
            f"START: {self.operation_name}", extra={"extra_info": self.context}
        )
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        assert (
            self.start_time is not None
        ), "PerformanceLogger was not entered before exit"
        duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if exc_type is None:
            self.logger.debug(
                f"END: {self.operation_name} (duration: {duration_ms:.2f}ms)",
                extra={"extra_info": {**self.context, "duration_ms": duration_ms}},
            )
            perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
            perf_logger.debug(
                f"{self.operation_name}: {duration_ms:.2f}ms",
                extra={"extra_info": {**self.context, "duration_ms": duration_ms}},
            )
        else:
            self.logger.debug(
                f"FAILED: {self.operation_name} (duration: {duration_ms:.2f}ms)",
                extra={
                    "extra_info": {
                        **self.context,
                        "duration_ms": duration_ms,
                        "error": str(exc_val),
                    }
                },
            )

        # Propagate the exception
        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that stores ``extra`` dicts as ``extra_info`` on the record.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Path] = None,
    enable_performance_logging: bool = False,
) -> None:
    """
    Configure console (and optionally file) output for the numcore loggers.

    Args:
        console_level: Log level for console output
        file_level: Log level for file output
        log_file: Path of the rotating log file; no file handler when None
        enable_performance_logging: Emit PerformanceLogger timings
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG)  # Filter on handler level

    # Remove existing handlers (prevents duplicates on repeated setup)
    package_logger.handlers.clear()

    # === Console handler ===
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        NumcoreLogFormatter(use_colors=True, include_extra=True)
    )
    package_logger.addHandler(console_handler)

    # === Main log file ===
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            NumcoreLogFormatter(use_colors=False, include_extra=True)
        )
        package_logger.addHandler(file_handler)

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
    perf_logger.setLevel(logging.DEBUG if enable_performance_logging else logging.INFO)

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.logging_config")
    logger.info(
        "Logging configured",
        extra={
            "extra_info": {
                "console_level": logging.getLevelName(console_level),
                "file_level": logging.getLevelName(file_level),
                "log_file": str(log_file) if log_file else None,
                "performance_logging": enable_performance_logging,
            }
        },
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Create a structured logger for a component.

    Args:
        name: Component name (usually __name__)

    Returns:
        StructuredLogger under the ``numcore`` namespace

    Example:
        logger = get_logger(__name__)
        logger.info("Interner created", extra={"entries": 0})
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return StructuredLogger(logging.getLogger(name), {})


# Library default: stay silent until the application configures logging
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())
