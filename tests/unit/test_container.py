"""
Unit tests for ServiceContainer.

Covers lifecycle, access before initialization, in-memory wiring and the
progression-to-leaderboard subscription.
"""

import pytest

from voidcore.container import ServiceContainer
from voidcore.modules.bank import BankService
from voidcore.modules.economy import FeeService
from voidcore.modules.leaderboard import LeaderboardService
from voidcore.modules.progression import SkillService


@pytest.fixture
async def container(config_manager, event_bus, mock_logger):
    container = ServiceContainer(config_manager, event_bus, mock_logger)
    await container.initialize()
    yield container
    await container.shutdown()


@pytest.mark.unit
class TestLifecycle:
    """Test initialize and shutdown."""

    async def test_services_built(self, container):
        assert isinstance(container.skills, SkillService)
        assert isinstance(container.bank, BankService)
        assert isinstance(container.fees, FeeService)
        assert isinstance(container.leaderboard, LeaderboardService)

    def test_access_before_initialize_fails(self, config_manager, event_bus):
        container = ServiceContainer(config_manager, event_bus)

        with pytest.raises(RuntimeError):
            container.bank

    async def test_second_initialize_is_noop(self, container, mock_logger):
        bank = container.bank

        await container.initialize()

        assert container.bank is bank
        mock_logger.warning.assert_called_once()

    async def test_health_check(self, container):
        health = await container.health_check()

        assert health["initialized"] is True
        assert health["service_count"] == 4
        assert health["database"] is None

    async def test_shutdown_detaches_sync(self, container, event_bus):
        assert event_bus.get_listener_count("progression.xp_gained") == 1

        await container.shutdown()

        assert event_bus.get_listener_count("progression.xp_gained") == 0
        with pytest.raises(RuntimeError):
            container.skills


@pytest.mark.unit
class TestWiring:
    """Test how the services are connected."""

    async def test_xp_reaches_level_board(self, container):
        await container.skills.record_event("p1", "SKU_MINT")

        rank = await container.leaderboard.get_current_rank("level", "p1")

        assert rank == {"rank": 1, "value": 100, "change": 0, "category": "level"}

    async def test_sync_can_be_disabled(self, config_manager, event_bus):
        config_manager.set("leaderboard.sync_progression", False)

        container = ServiceContainer(config_manager, event_bus)
        await container.initialize()

        assert event_bus.get_listener_count("progression.xp_gained") == 0

    async def test_create_builds_ready_container(self, config_manager):
        container = await ServiceContainer.create(config_manager)

        assert (await container.fees.distribute(100))["xvoid"] == 40
        assert container.config_manager is config_manager
