import sys
from pathlib import Path
from typing import Optional
from loguru import logger
from fastapi import Request
from framework.config import settings

# Trace id of log lines emitted outside any request (startup, migrations, tests)
SYSTEM_TRACE_ID = "system"

LOG_DIR = Path(settings.LOG_DIR)
LOG_DIR.mkdir(parents=True, exist_ok=True)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | Trace:{extra[trace_id]} - {message}"


class LogConfig:
    """Loguru sinks for the API: console, daily application log, error log."""

    @classmethod
    def setup_logging(cls):
        logger.remove()
        # Defaults for records that carry neither a bound name nor a request trace id
        logger.configure(extra={"trace_id": SYSTEM_TRACE_ID, "name": "app"})

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=CONSOLE_FORMAT,
            level=settings.LOG_LEVEL,
        )
        logger.add(
            LOG_DIR / "app_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            compression="zip",
            enqueue=True,
            format=FILE_FORMAT,
            level="DEBUG",
        )
        logger.add(
            LOG_DIR / "error_{time:YYYY-MM-DD}.log",
            rotation="100 MB",
            enqueue=True,
            format=FILE_FORMAT,
            level="ERROR",
        )


def get_logger(name: Optional[str] = None, request: Optional[Request] = None):
    """Logger bound to a component name.

    The trace id is only bound when a request is passed explicitly; module-level
    loggers pick it up per call from LoggingMiddleware's contextualize().
    """
    bound = {}
    if name:
        bound["name"] = name
    if request is not None:
        bound["trace_id"] = getattr(request.state, "trace_id", SYSTEM_TRACE_ID)
    return logger.bind(**bound)
