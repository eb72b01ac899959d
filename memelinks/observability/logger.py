# memelinks/observability/logger.py

# structured JSON logger
import logging
import os
import sys
import traceback

from pythonjsonlogger.json import JsonFormatter

ERROR_LOGGER_NAME = "error"

error_logger = logging.getLogger(ERROR_LOGGER_NAME)


def _build_formatter() -> logging.Formatter:
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s %(pathname)s %(lineno)d",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def configure_logging(settings) -> None:
    """Configure root logging with JSON output.

    - Adds a JSON console handler (stdout) on the root logger, once.
    - Optionally routes ERROR records to LOGS_PATH/error.log.
    - Safe to call repeatedly (tests build several apps per process).
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)

    formatter = _build_formatter()

    have_console = any(getattr(h, "_memelinks_console", False) for h in root.handlers)
    if not have_console:
        console = logging.StreamHandler(stream=sys.stdout)
        console.setFormatter(formatter)
        console._memelinks_console = True
        root.addHandler(console)

    if settings.LOG_TO_FILE and not error_logger.handlers:
        os.makedirs(settings.LOGS_PATH, exist_ok=True)
        handler = logging.FileHandler(os.path.join(settings.LOGS_PATH, "error.log"), encoding="utf-8")
        handler.setLevel(logging.ERROR)
        handler.setFormatter(formatter)
        error_logger.addHandler(handler)

    logging.getLogger("startup").info("logging configured", extra={"log_level": settings.LOG_LEVEL})


def log_exception(e: Exception, context: str = "") -> None:
    """Write the full traceback of e to the error logger."""
    error_logger.error(
        f"Exception in {context}: {type(e).__name__}: {e}",
        extra={"traceback": traceback.format_exc()},
    )
