"""
Service Container
=================

Purpose
-------
Build every service with its repositories and shared infrastructure, and
hand out the instances.

Responsibilities
----------------
- Choose storage: in-memory repositories by default, SQLAlchemy repositories
  when a `DatabaseService` is given
- Share one `PlayerLockRegistry` between services that touch player state
- Optionally subscribe the leaderboard to progression events
- Track per-service construction time for `health_check`

Non-Responsibilities
--------------------
- Business logic
- Engine lifecycle (the caller owns the `DatabaseService`)
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, TypeVar

from voidcore.core.config.manager import ConfigManager
from voidcore.core.event.bus import EventBus
from voidcore.core.logging.logger import get_logger
from voidcore.modules.bank import BankService, SqlAlchemyStakingRepository, SqlAlchemyTransactionLog
from voidcore.modules.economy import FeeService
from voidcore.modules.leaderboard import LeaderboardService
from voidcore.modules.progression import SkillService, SqlAlchemySkillRepository
from voidcore.modules.shared import (
    InMemoryAccountRepository,
    InMemoryRepository,
    InMemoryTransactionLog,
    PlayerLockRegistry,
)

if TYPE_CHECKING:
    from logging import Logger

    from voidcore.core.database.service import DatabaseService

S = TypeVar("S")

NOT_INITIALIZED = "ServiceContainer not initialized. Call initialize() first."


class ServiceContainer:
    """
    Dependency container for the four services.

    Usage:
        container = ServiceContainer(ConfigManager(), EventBus())
        await container.initialize()

        await container.bank.deposit("p1", 100)
        await container.skills.add_xp("p1", "explorer", 250)
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        database: Optional[DatabaseService] = None,
    ) -> None:
        self._config_manager = config_manager
        self._event_bus = event_bus
        self._logger = logger or get_logger(__name__)
        self._database = database
        self._locks = PlayerLockRegistry()

        self._skills: Optional[SkillService] = None
        self._bank: Optional[BankService] = None
        self._fees: Optional[FeeService] = None
        self._leaderboard: Optional[LeaderboardService] = None
        self._sync_listener_id: Optional[str] = None

        self._initialized = False
        self._service_init_times: Dict[str, float] = {}
        self._init_start: Optional[float] = None
        self._init_end: Optional[float] = None

    @classmethod
    async def create(
        cls,
        config_manager: Optional[ConfigManager] = None,
        database: Optional[DatabaseService] = None,
    ) -> "ServiceContainer":
        """Build and initialize a container with a fresh event bus."""
        config_manager = config_manager or ConfigManager()
        container = cls(config_manager, EventBus(config_manager), database=database)
        await container.initialize()
        return container

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(self) -> None:
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        self._init_start = time.perf_counter()
        storage = "sqlalchemy" if self._database is not None else "memory"
        self._logger.info("Service container initialization starting", extra={"storage": storage})

        try:
            if self._database is not None:
                skill_repo: Any = SqlAlchemySkillRepository(self._database)
                account_repo: Any = SqlAlchemyStakingRepository(self._database)
                transaction_log: Any = SqlAlchemyTransactionLog(self._database)
            else:
                skill_repo = InMemoryRepository()
                transaction_log = InMemoryTransactionLog()
                account_repo = InMemoryAccountRepository(transaction_log)

            self._skills = self._create_service(
                "skills",
                lambda logger: SkillService(
                    skill_repo,
                    self._config_manager,
                    self._event_bus,
                    logger,
                    locks=self._locks,
                ),
                SkillService,
            )
            self._bank = self._create_service(
                "bank",
                lambda logger: BankService(
                    account_repo,
                    transaction_log,
                    self._config_manager,
                    self._event_bus,
                    logger,
                    locks=self._locks,
                ),
                BankService,
            )
            self._fees = self._create_service(
                "fees",
                lambda logger: FeeService(self._config_manager, self._event_bus, logger),
                FeeService,
            )
            self._leaderboard = self._create_service(
                "leaderboard",
                lambda logger: LeaderboardService(self._config_manager, self._event_bus, logger),
                LeaderboardService,
            )

            if self._config_manager.get("leaderboard.sync_progression", True):
                self._sync_listener_id = self._leaderboard.subscribe_to_progression()

            self._init_end = time.perf_counter()
            self._initialized = True
            self._logger.info(
                "Service container initialized",
                extra={
                    "total_time_seconds": round(self._init_end - self._init_start, 3),
                    "service_count": len(self._service_init_times),
                    "storage": storage,
                },
            )
        except Exception as e:
            self._logger.critical(
                "Service container initialization failed",
                exc_info=True,
                extra={"error": str(e)},
            )
            raise

    def _create_service(
        self, name: str, factory: Callable[[Logger], S], cls: type
    ) -> S:
        start = time.perf_counter()
        try:
            instance = factory(get_logger(f"{cls.__module__}.{cls.__name__}"))
        except Exception:
            self._logger.error(f"Failed to initialize {name}", exc_info=True)
            raise

        duration = time.perf_counter() - start
        self._service_init_times[name] = duration
        self._logger.debug(f"Initialized {name} in {duration:.3f}s")
        return instance

    async def shutdown(self) -> None:
        """Detach event subscriptions. The database, if any, is left to its owner."""
        if not self._initialized:
            return

        if self._sync_listener_id is not None:
            self._event_bus.unsubscribe("progression.xp_gained", self._sync_listener_id)
            self._sync_listener_id = None

        self._initialized = False
        self._logger.info("Service container shut down")

    async def health_check(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "initialized": self._initialized,
            "service_count": len(self._service_init_times),
            "total_init_time_seconds": (
                round(self._init_end - self._init_start, 3)
                if self._init_start and self._init_end
                else None
            ),
            "database": None,
        }
        if self._database is not None:
            result["database"] = await self._database.health_check()
        return result

    # ========================================================================
    # Services
    # ========================================================================

    @property
    def config_manager(self) -> ConfigManager:
        return self._config_manager

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def skills(self) -> SkillService:
        if not self._initialized or self._skills is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._skills

    @property
    def bank(self) -> BankService:
        if not self._initialized or self._bank is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._bank

    @property
    def fees(self) -> FeeService:
        if not self._initialized or self._fees is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._fees

    @property
    def leaderboard(self) -> LeaderboardService:
        if not self._initialized or self._leaderboard is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._leaderboard
