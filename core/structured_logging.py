"""Structured logging helpers with run, phase and manifest correlation."""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "run_id", default="-"
)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "phase", default="-"
)
_MANIFEST_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "manifest", default="-"
)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | phase=%(phase)s | "
    "manifest=%(manifest)s | %(name)s | %(message)s"
)


class _RunContextFilter(logging.Filter):
    """Attach correlation fields to every record passing a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID_VAR.get("-")
        record.phase = _PHASE_VAR.get("-")
        record.manifest = _MANIFEST_VAR.get("-")
        return True


def _install_filter(handler: logging.Handler) -> None:
    if not any(isinstance(f, _RunContextFilter) for f in handler.filters):
        handler.addFilter(_RunContextFilter())


def configure_structured_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger to emit correlation fields."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)
    for handler in root_logger.handlers:
        _install_filter(handler)


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the run correlation ID."""
    value = run_id or uuid.uuid4().hex[:12]
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    return _RUN_ID_VAR.get("-")


@contextmanager
def phase_scope(phase: str) -> Iterator[None]:
    """Tag records emitted inside the block with ``phase``."""
    token = _PHASE_VAR.set(phase)
    try:
        yield
    finally:
        _PHASE_VAR.reset(token)


@contextmanager
def manifest_scope(manifest: str) -> Iterator[None]:
    """Tag records emitted inside the block with the manifest being processed."""
    token = _MANIFEST_VAR.set(manifest)
    try:
        yield
    finally:
        _MANIFEST_VAR.reset(token)
