"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour
that providers and the root rely on.
"""

from __future__ import annotations

import logging

import pytest

from lib_config_tree import bind_trace_id, get_logger
from lib_config_tree.core import ConfigurationBuilder
from lib_config_tree.observability import TRACE_ID, log_info, make_event, start_trace


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert logger.name == "lib_config_tree"
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_config_tree")
    bind_trace_id("trace-123")
    log_info("configuration_reloaded", provider="root", path=None)
    assert caplog.records
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "provider": "root", "path": None}
    bind_trace_id(None)


def test_bind_trace_id_clears_context() -> None:
    """Clearing the trace ID should reset the context variable to None."""

    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without mutating base keys."""

    event = make_event("env", None, {"keys": 3})
    assert event == {"provider": "env", "path": None, "keys": 3}
    assert make_event("json", "app.json") == {"provider": "json", "path": "app.json"}


@pytest.mark.asyncio
async def test_build_and_load_events(caplog: pytest.LogCaptureFixture) -> None:
    """Building a root logs every provider load and the final composition."""

    caplog.set_level(logging.DEBUG, logger="lib_config_tree")
    await ConfigurationBuilder().add_memory_collection({"a": "1", "b": "2"}).build()
    messages = [record.getMessage() for record in caplog.records]
    assert "provider_loaded" in messages
    built = [record for record in caplog.records if record.getMessage() == "configuration_built"]
    assert getattr(built[0], "context")["providers"] == 1
    loaded = [record for record in caplog.records if record.getMessage() == "provider_loaded"]
    assert getattr(loaded[0], "context")["keys"] == 2


@pytest.mark.asyncio
async def test_build_records_share_one_trace_id(caplog: pytest.LogCaptureFixture) -> None:
    """Every record of one build carries the trace id minted for that build."""

    caplog.set_level(logging.DEBUG, logger="lib_config_tree")
    await ConfigurationBuilder().add_memory_collection({"a": "1"}).add_environment_variables(environ={}).build()
    trace_ids = {getattr(record, "context")["trace_id"] for record in caplog.records}
    assert len(trace_ids) == 1
    assert None not in trace_ids
    bind_trace_id(None)


def test_start_trace_binds_fresh_ids() -> None:
    first, second = start_trace(), start_trace()
    assert first != second
    assert TRACE_ID.get() == second
    bind_trace_id(None)
