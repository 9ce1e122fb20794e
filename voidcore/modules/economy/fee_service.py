"""
Fee distribution service.

Splits collected fees across the configured sinks and keeps running
per-sink totals for this process.

Config keys:
- ``fees.split``: sink -> whole percentage, summing to 100. Without it the
  standard five-sink split is used.
- ``fees.remainder_sink``: sink that absorbs rounding remainders (default:
  the first sink)
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Dict, Optional

from voidcore.domain.exceptions import InvalidArgumentError
from voidcore.domain.models.fees import DEFAULT_FEE_SPLIT, FeeSplit, distribute
from voidcore.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from voidcore.core.config.manager import ConfigManager
    from voidcore.core.event.bus import EventBus


class FeeService(BaseService):
    """
    Service wrapper around `distribute`.

    The split is read from config once, at construction, and validated then;
    a bad split fails fast instead of on the first fee.
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        split: Optional[FeeSplit] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._split = split or self._split_from_config()
        self._totals: Counter[str] = Counter({sink: 0 for sink in self._split.sinks})

    def _split_from_config(self) -> FeeSplit:
        shares = self.get_config("fees.split")
        remainder_sink = self.get_config("fees.remainder_sink")
        if shares is None:
            return DEFAULT_FEE_SPLIT
        try:
            return FeeSplit(shares, remainder_sink=remainder_sink)
        except InvalidArgumentError as e:
            self.log_error("load_fee_split", e, shares=dict(shares))
            raise

    @property
    def split(self) -> FeeSplit:
        return self._split

    async def distribute(self, fee_amount: int, source: Optional[str] = None) -> Dict[str, int]:
        """
        Allocate ``fee_amount`` across the sinks and add it to the totals.

        Args:
            fee_amount: Fee in whole VOID units
            source: Optional label for logs and the event (e.g. ``"marketplace"``)

        Returns:
            Sink -> allocated units, summing to ``fee_amount``

        Raises:
            InvalidArgumentError: Negative or non-integer fee
        """
        try:
            allocations = distribute(fee_amount, self._split)
        except InvalidArgumentError as e:
            self.log_error("distribute_fees", e, fee_amount=repr(fee_amount), source=source)
            raise

        self._totals.update(allocations)
        self.log_operation(
            "distribute_fees",
            fee_amount=fee_amount,
            source=source,
            allocations=allocations,
        )
        await self.emit_event(
            "economy.fees_distributed",
            {"fee_amount": fee_amount, "source": source, "allocations": dict(allocations)},
        )
        return allocations

    def totals(self) -> Dict[str, int]:
        """Units distributed to each sink since this service started."""
        return {sink: self._totals[sink] for sink in self._split.sinks}
