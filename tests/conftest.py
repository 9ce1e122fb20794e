"""
Pytest Configuration and Fixtures for the VOID economy core
============================================================

Purpose
-------
Shared fixtures for the test suite: isolated configuration, a real event
bus with an event recorder, in-memory repositories, the four services and
an in-memory aiosqlite database for repository tests.

Architecture Notes
------------------
- Unit tests run services against in-memory repositories (fast, isolated)
- Integration tests use a fresh ``sqlite+aiosqlite://`` engine per test
- Config fixtures point at an empty temp directory so the repo's YAML files
  never leak into assertions
"""

from __future__ import annotations

import os

# Environment must be set before voidcore.core.config is imported.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_TO_FILE", "false")

from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, List, Tuple

import pytest
import pytest_asyncio

from voidcore.core.config.manager import ConfigManager
from voidcore.core.database.service import DatabaseService
from voidcore.core.event.bus import EventBus
from voidcore.modules.bank import BankService
from voidcore.modules.economy import FeeService
from voidcore.modules.leaderboard import LeaderboardService
from voidcore.modules.progression import SkillService
from voidcore.modules.shared import (
    InMemoryAccountRepository,
    InMemoryRepository,
    InMemoryTransactionLog,
    PlayerLockRegistry,
)

# A fixed instant so quota-window tests never straddle midnight.
NOW = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# INFRASTRUCTURE FIXTURES
# ============================================================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config_manager(tmp_path) -> ConfigManager:
    """
    ConfigManager with built-in defaults only.

    Scope: function (tests may call ``set`` freely)
    """
    manager = ConfigManager(config_dir=tmp_path)
    manager.initialize()
    return manager


@pytest.fixture
def event_bus(config_manager: ConfigManager) -> EventBus:
    return EventBus(config_manager)


class EventRecorder:
    """Collects every published event as ``(name, payload)``."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> List[Dict[str, Any]]:
        return [payload for event, payload in self.events if event == name]


@pytest.fixture
def recorded_events(event_bus: EventBus) -> EventRecorder:
    """Record the events the services publish, in order."""
    recorder = EventRecorder()

    def make_listener(name: str):
        def listener(payload: Dict[str, Any]) -> None:
            recorder.events.append((name, dict(payload)))

        return listener

    for name in (
        "progression.xp_gained",
        "progression.level_up",
        "bank.deposited",
        "bank.staked",
        "bank.unstaked",
        "bank.withdrawn",
        "bank.interest_accrued",
        "bank.interest_claimed",
        "economy.fees_distributed",
        "leaderboard.score_updated",
    ):
        event_bus.subscribe(name, make_listener(name), identifier=f"recorder@{name}")
    return recorder


@pytest.fixture
def mock_logger(mocker):
    """
    Mock logger for asserting on service log calls.

    Scope: function
    """
    return mocker.MagicMock()


@pytest.fixture
def mock_event_bus(mocker):
    """
    Mock EventBus for unit tests that only check what was published.

    Scope: function
    """
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock(return_value=[])
    mock_bus.subscribe = mocker.MagicMock(return_value="listener-id")
    return mock_bus


@pytest.fixture
def locks() -> PlayerLockRegistry:
    return PlayerLockRegistry()


# ============================================================================
# SERVICE FIXTURES (in-memory storage)
# ============================================================================


@pytest.fixture
def skill_repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def transaction_log() -> InMemoryTransactionLog:
    return InMemoryTransactionLog()


@pytest.fixture
def account_repository(transaction_log) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(transaction_log)


@pytest.fixture
def skill_service(skill_repository, config_manager, event_bus, mock_logger, locks) -> SkillService:
    return SkillService(skill_repository, config_manager, event_bus, mock_logger, locks=locks)


@pytest.fixture
def bank_service(
    account_repository, transaction_log, config_manager, event_bus, mock_logger, locks
) -> BankService:
    return BankService(
        account_repository,
        transaction_log,
        config_manager,
        event_bus,
        mock_logger,
        locks=locks,
    )


@pytest.fixture
def fee_service(config_manager, event_bus, mock_logger) -> FeeService:
    return FeeService(config_manager, event_bus, mock_logger)


@pytest.fixture
def leaderboard_service(config_manager, event_bus, mock_logger) -> LeaderboardService:
    return LeaderboardService(config_manager, event_bus, mock_logger)


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[DatabaseService, None]:
    """
    In-memory aiosqlite database with the schema created.

    Scope: function (clean slate per test)
    """
    service = DatabaseService.from_url("sqlite+aiosqlite:///:memory:")
    await service.create_all()
    yield service
    await service.shutdown()
