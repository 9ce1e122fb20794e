"""
Base Service Foundation

Purpose
-------
Provides the foundational class for all economy services. Services
orchestrate pure domain models around storage, per-player locking, event
emission and logging.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers

What this class does NOT do:
- Manage database transactions (repositories and DatabaseService do that)
- Contain economy rules (the domain models do that)

Usage
-----
    class BankService(BaseService):
        def __init__(self, accounts, config_manager, event_bus, logger):
            super().__init__(config_manager, event_bus, logger)
            self._accounts = accounts

        async def stake(self, player_id: str, amount) -> dict:
            # Service logic here, using self.log_operation, self.get_config,
            # self.emit_event
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from voidcore.core.exceptions import ConfigurationError
from voidcore.domain.exceptions import VoidDomainException

if TYPE_CHECKING:
    from logging import Logger

    from voidcore.core.config.manager import ConfigManager
    from voidcore.core.event.bus import EventBus


class BaseService:
    """
    Base class for all economy services.

    Args:
        config_manager: Balance configuration manager
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(
                key, f"Required configuration key '{key}' is missing"
            )
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Publish a domain event for cross-module communication."""
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """
        Log a service error with full context.

        Domain rejections (bad input, insufficient funds, quota) are logged
        at WARNING; anything else at ERROR.
        """
        level = "warning" if isinstance(error, VoidDomainException) else "error"
        extra = {
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error),
            **context,
        }
        error_code = getattr(error, "error_code", None)
        if error_code:
            extra["error_code"] = error_code
        getattr(self.log, level)(
            f"Service error during {operation}: {error}",
            extra=extra,
        )
