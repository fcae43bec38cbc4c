"""Structured logging for providers, roots, and the CLI.

Purpose
    Every log record carries a ``context`` dict naming the provider and path
    involved, plus the trace id of the build or reload that caused it, so one
    composition can be followed across concurrently loading providers.

Contents
    - ``TRACE_ID``: context variable holding the current trace id.
    - ``get_logger``: the ``lib_config_tree`` logger (``NullHandler`` attached).
    - ``bind_trace_id`` / ``start_trace``: set, clear, or mint a trace id.
    - ``log_debug`` / ``log_info`` / ``log_error``: structured emitters.
    - ``make_event``: ``{"provider", "path", ...}`` payload helper.

System Integration
    ``ConfigurationBuilder.build`` and ``ConfigurationRoot.reload`` start a
    trace; tasks spawned by ``asyncio.gather`` copy the context, so provider
    loads log under the same id. The domain layer never logs.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_config_tree_trace_id", default=None)
"""Trace id attached to every record emitted in the current context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_config_tree")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger; attach handlers to see its output."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Set (or clear with ``None``) the trace id for the current context.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def start_trace() -> str:
    """Bind a fresh random trace id and return it.

    Examples
    --------
    >>> trace_id = start_trace()
    >>> TRACE_ID.get() == trace_id and len(trace_id) == 32
    True
    >>> bind_trace_id(None)
    """

    trace_id = uuid.uuid4().hex
    TRACE_ID.set(trace_id)
    return trace_id


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(provider: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the standard ``provider``/``path`` fields merged with *payload*.

    Examples
    --------
    >>> make_event('env', None, {'keys': 3})
    {'provider': 'env', 'path': None, 'keys': 3}
    """

    return {"provider": provider, "path": path, **(payload or {})}


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    if _LOGGER.isEnabledFor(level):
        _LOGGER.log(level, message, extra={"context": {"trace_id": TRACE_ID.get(), **fields}})
