"""
Logging for StudyGate.

Every record carries two context fields in ``extra``: ``component`` names
the part of the gateway that logged it (``query[pacs]``, ``ingestion``) and
``run_id`` ties together the records of one local ingestion. Both default to
``-`` so the console format never fails on records logged outside a context.
"""

import inspect
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

from loguru import logger as _logger

from ..settings import Settings, settings

CONTEXT_DEFAULTS = {"component": "-", "run_id": "-"}

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[component]}</magenta> <dim>run={extra[run_id]}</dim> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers routed through loguru
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "httpx")


class InterceptHandler(logging.Handler):
    """Forward standard library records to loguru, tagged with their logger name."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.bind(component=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(config: Settings) -> None:
    """Install the console sink, and the rotating file sink when enabled."""
    _logger.remove()
    _logger.configure(extra=CONTEXT_DEFAULTS)
    log_format = config.log_format or DEFAULT_FORMAT

    _logger.add(sys.stderr, level=config.log_level, format=log_format, colorize=True)

    if config.log_to_file:
        log_dir = config.get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        _logger.add(
            str(log_dir / "studygate.log"),
            level=config.log_level,
            format=log_format,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]


def component_logger(component: str):
    """Logger whose records are tagged with ``component``."""
    return _logger.bind(component=component)


@contextmanager
def ingestion_run() -> Iterator[str]:
    """Tag every record logged inside the block with a fresh run id.

    The id follows the current task, including work handed to ``to_thread``.
    """
    run_id = uuid4().hex[:8]
    with _logger.contextualize(run_id=run_id):
        yield run_id


setup_logging(settings)

logger = _logger
