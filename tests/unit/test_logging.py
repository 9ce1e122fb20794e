"""
Unit tests for the logging subsystem.

Covers context binding (sync, async and nested), record enrichment by
ContextFilter, JSON output, setup/shutdown and logging health.
"""

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from voidcore.core.logging import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logging_health,
    set_log_context,
    setup_logging,
    shutdown_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="voidcore.modules.bank.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Service operation: %s",
        args=("withdraw",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestLogContext:
    """Test binding operation context."""

    def test_context_bound_inside_block_only(self):
        with LogContext(player_id="p1", operation="withdraw"):
            context = get_log_context()

        assert context["player_id"] == "p1"
        assert context["operation"] == "withdraw"
        assert len(context["correlation_id"]) == 8
        assert get_log_context() == {}

    def test_nested_context_inherits_correlation_id(self):
        with LogContext(player_id="p1", correlation_id="abc12345"):
            with LogContext(operation="stake"):
                inner = get_log_context()

        assert inner == {"player_id": "p1", "operation": "stake", "correlation_id": "abc12345"}

    async def test_async_contexts_are_isolated_per_task(self):
        async def run(player_id: str) -> str:
            async with LogContext(player_id=player_id):
                await asyncio.sleep(0)
                return get_log_context()["player_id"]

        assert await asyncio.gather(run("a"), run("b")) == ["a", "b"]

    def test_set_log_context(self):
        set_log_context(player_id=42, category="level", season="s1")

        assert get_log_context() == {"player_id": "42", "category": "level", "season": "s1"}


@pytest.mark.unit
class TestContextFilter:
    """Test record enrichment."""

    def test_context_copied_to_record(self):
        # Arrange
        record = make_record()

        # Act
        with LogContext(player_id="p1", operation="withdraw", correlation_id="c0ffee00"):
            ContextFilter().filter(record)

        # Assert
        assert record.player_id == "p1"
        assert record.operation == "withdraw"
        assert record.correlation_id == "c0ffee00"

    def test_explicit_extra_wins(self):
        record = make_record(operation="stake")

        with LogContext(operation="event:bank.staked"):
            ContextFilter().filter(record)

        assert record.operation == "stake"

    def test_missing_context_is_placeholder(self):
        record = make_record()

        ContextFilter().filter(record)

        assert record.player_id == "N/A"
        assert record.correlation_id == "N/A"


@pytest.mark.unit
class TestJSONFormatter:
    """Test structured output."""

    def test_json_output(self):
        # Arrange
        record = make_record(amount=Decimal("2500.50"), at=datetime(2025, 1, 1, tzinfo=timezone.utc))
        with LogContext(player_id="p1"):
            ContextFilter().filter(record)

        # Act
        data = json.loads(JSONFormatter().format(record))

        # Assert
        assert data["message"] == "Service operation: withdraw"
        assert data["level"] == "INFO"
        assert data["player_id"] == "p1"
        assert "category" not in data
        assert data["extra"] == {"amount": "2500.50", "at": "2025-01-01T00:00:00+00:00"}

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


@pytest.mark.unit
class TestLoggingHealth:
    """Test the health snapshot."""

    def test_logging_initialized_on_import(self):
        health = get_logging_health()

        assert health.initialized is True
        assert health.queue_max_size == 10_000
        assert health.records_dropped == 0

    def test_setup_is_idempotent(self):
        root = logging.getLogger()
        handlers = list(root.handlers)

        setup_logging()

        assert root.handlers == handlers

    def test_shutdown_then_setup(self):
        shutdown_logging()
        try:
            assert get_logging_health().initialized is False
            assert get_logging_health().queue_max_size == 0
        finally:
            setup_logging()

        assert get_logging_health().initialized is True
