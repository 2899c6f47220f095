from __future__ import annotations

import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

LOGGER_NAME = "learntrack"
LOG_FORMAT = (
    "%(asctime)s %(levelname)-8s %(name)s "
    "pid=%(process)d request_id=%(request_id)s src=%(filename)s:%(lineno)d "
    "%(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the HTTP request being served ("-" outside one)."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = REQUEST_ID.get()
        return True


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _add_handler(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(RequestIdFilter())
    logger.addHandler(handler)


def configure_logging(
    *,
    log_dir: str | Path | None = None,
    log_file: str = "learntrack.log",
    level: str = "INFO",
) -> logging.Logger:
    """
    Configure the application logger: a rotating file under LOG_DIR (default ./logs)
    and, when LOG_CONSOLE is truthy, a stdout handler.
    Idempotent: every module calls it at import.
    """

    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_configured", False):
        return logger

    name = os.getenv("LOG_LEVEL", level).upper()
    numeric_level = logging.getLevelNamesMapping().get(name, logging.INFO)
    logger.setLevel(numeric_level)
    logger.propagate = False

    log_dir = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    _add_handler(
        logger,
        RotatingFileHandler(
            filename=str(log_dir / log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=10,
            encoding="utf-8",
        ),
        numeric_level,
    )
    if _env_flag("LOG_CONSOLE"):
        _add_handler(logger, logging.StreamHandler(sys.stdout), numeric_level)

    logger._configured = True  # type: ignore[attr-defined]
    return logger


def bind_request_id(request_id: Optional[str] = None) -> tuple[str, Token]:
    """Use the caller's X-Request-ID when present, else a fresh uuid4."""
    rid = request_id or str(uuid.uuid4())
    return rid, REQUEST_ID.set(rid)


def unbind_request_id(token: Token) -> None:
    REQUEST_ID.reset(token)


@contextmanager
def log_operation(logger: logging.Logger, name: str) -> Iterator[None]:
    """Log how long a block took, and the traceback if it raised."""
    start = time.perf_counter()
    try:
        yield
    except Exception:
        logger.exception("%s failed duration_ms=%d", name, (time.perf_counter() - start) * 1000)
        raise
    logger.info("%s ok duration_ms=%d", name, (time.perf_counter() - start) * 1000)
