"""
Unit tests for EventBus.

Covers exact and wildcard subscriptions, priority order, one-shot listeners,
error and timeout isolation, and signature validation.
"""

import asyncio

import pytest

from voidcore.core.event import EventBus, EventRouter, ListenerPriority


@pytest.fixture
def bus() -> EventBus:
    return EventBus(listener_timeout_seconds=0.05)


@pytest.mark.unit
class TestEventRouter:
    """Test wildcard matching."""

    @pytest.mark.parametrize(
        ("event", "pattern", "expected"),
        [
            ("bank.staked", "bank.staked", True),
            ("bank.staked", "bank.*", True),
            ("bank.staked", "*", True),
            ("progression.level_up", "*.level_up", True),
            ("bank.interest.claimed", "bank.*.claimed", True),
            ("bank.staked", "progression.*", False),
            ("bank", "bank.*", False),
            ("bank.staked", "bank.stake", False),
        ],
    )
    def test_matches(self, event, pattern, expected):
        assert EventRouter().matches(event, pattern) is expected


@pytest.mark.unit
class TestPublish:
    """Test delivery."""

    async def test_exact_and_wildcard_listeners_receive_payload(self, bus):
        # Arrange
        received = []
        bus.subscribe("bank.staked", lambda data: received.append(("exact", data["amount"])))
        bus.subscribe("bank.*", lambda data: received.append(("wildcard", data["amount"])))

        # Act
        await bus.publish("bank.staked", {"player_id": "p1", "amount": "10"})

        # Assert
        assert sorted(received) == [("exact", "10"), ("wildcard", "10")]

    async def test_no_listeners_returns_empty(self, bus):
        assert await bus.publish("nothing.here", {}) == []

    async def test_priority_order(self, bus):
        # Arrange
        order = []
        bus.subscribe(
            "x.y", lambda d: order.append("low"), priority=ListenerPriority.LOW, identifier="low"
        )
        bus.subscribe(
            "x.y",
            lambda d: order.append("critical"),
            priority=ListenerPriority.CRITICAL,
            identifier="crit",
        )
        bus.subscribe("x.y", lambda d: order.append("normal"), identifier="normal")

        # Act
        await bus.publish("x.y", {})

        # Assert
        assert order == ["critical", "normal", "low"]

    async def test_async_listener_result_returned(self, bus):
        async def listener(data):
            return data["n"] * 2

        bus.subscribe("calc.double", listener)

        assert await bus.publish("calc.double", {"n": 4}) == [8]

    async def test_once_listener_runs_once(self, bus):
        calls = []
        bus.subscribe("a.b", lambda d: calls.append(d), once=True)

        await bus.publish("a.b", {"n": 1})
        await bus.publish("a.b", {"n": 2})

        assert calls == [{"n": 1}]
        assert bus.get_listener_count("a.b") == 0


@pytest.mark.unit
class TestIsolation:
    """Test that one bad listener does not affect the others."""

    async def test_failing_listener_is_isolated(self, bus):
        # Arrange
        delivered = []

        def broken(data):
            raise RuntimeError("boom")

        bus.subscribe("bank.withdrawn", broken, priority=ListenerPriority.HIGH)
        bus.subscribe("bank.withdrawn", lambda d: delivered.append(d))

        # Act
        await bus.publish("bank.withdrawn", {"player_id": "p1"})

        # Assert
        assert delivered == [{"player_id": "p1"}]
        assert bus.get_metrics_summary()["errors_by_event"] == {"bank.withdrawn": 1}

    async def test_slow_listener_times_out(self, bus):
        delivered = []

        async def slow(data):
            await asyncio.sleep(1)

        bus.subscribe("slow.event", slow, priority=ListenerPriority.HIGH)
        bus.subscribe("slow.event", lambda d: delivered.append(True))

        await bus.publish("slow.event", {})

        assert delivered == [True]
        assert bus.get_metrics_summary()["total_errors"] == 1


@pytest.mark.unit
class TestSubscriptions:
    """Test subscription bookkeeping."""

    def test_duplicate_subscription_prevented(self, bus):
        def listener(data):
            pass

        first = bus.subscribe("a.b", listener)
        second = bus.subscribe("a.b", listener)

        assert first == second
        assert bus.get_listener_count("a.b") == 1

    def test_unsubscribe(self, bus):
        listener_id = bus.subscribe("a.b", lambda d: None, identifier="mine")

        assert bus.unsubscribe("a.b", listener_id) is True
        assert bus.unsubscribe("a.b", listener_id) is False
        assert bus.get_all_events() == []

    def test_callback_needing_two_arguments_rejected(self, bus):
        def listener(a, b):
            pass

        with pytest.raises(ValueError):
            bus.subscribe("a.b", listener)

    def test_callback_with_no_arguments_rejected(self, bus):
        with pytest.raises(ValueError):
            bus.subscribe("a.b", lambda: None)

    def test_timeout_from_config(self, config_manager):
        config_manager.set("events.listener_timeout_seconds", 1.5)

        bus = EventBus(config_manager)

        assert bus._timeout == 1.5
