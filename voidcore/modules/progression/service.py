"""
Skill progression service.

Purpose
-------
Award XP to a player's skills and tracks, persist the result and announce
level-ups. All level math lives in ``voidcore.domain.models.skill``; this
service adds storage, per-player locking, events and logging.

Events
------
- ``progression.xp_gained``: every successful award (including zero XP)
- ``progression.level_up``: when the awarded skill's level increased
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from voidcore.domain.models.base import validate_not_empty
from voidcore.domain.models.skill import (
    SkillSheet,
    SkillUpdate,
    XpEventType,
    add_xp,
    xp_award_for_event,
)
from voidcore.modules.shared.base_service import BaseService
from voidcore.modules.shared.locks import PlayerLockRegistry

if TYPE_CHECKING:
    from logging import Logger

    from voidcore.core.config.manager import ConfigManager
    from voidcore.core.event.bus import EventBus
    from voidcore.modules.shared.repository import StateRepository


class SkillService(BaseService):
    """
    Service for XP and level progression.

    Public Methods
    --------------
    - get_skill() -> Level progress of one skill
    - add_xp() -> Add XP to one skill
    - record_event() -> Award track XP for a gameplay event
    - get_player_xp() -> Per-track XP, total XP and overall level
    """

    def __init__(
        self,
        skills: StateRepository[SkillSheet],
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        locks: Optional[PlayerLockRegistry] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._skills = skills
        self._locks = locks or PlayerLockRegistry()

    async def _load_sheet(self, player_id: str) -> SkillSheet:
        sheet = await self._skills.load(player_id)
        return sheet if sheet is not None else SkillSheet()

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_skill(self, player_id: str, skill: str) -> Dict[str, Any]:
        """
        Level progress of ``skill``; an untouched skill reads as level 0.

        Returns:
            Dict with ``skill``, ``level``, ``xp``, ``xpToNext`` and ``progress``
            (percent of the current level, one decimal)
        """
        validate_not_empty(player_id, "player_id")
        validate_not_empty(skill, "skill")

        sheet = await self._load_sheet(player_id)
        return {"skill": skill, **sheet.get(skill).progress.to_dict()}

    async def get_player_xp(self, player_id: str) -> Dict[str, Any]:
        """
        Per-track XP, total XP and overall level.

        Example:
            >>> await skills.get_player_xp("p1")
            {'totalXp': 160, 'explorerXp': 60, 'builderXp': 100, 'operatorXp': 0, 'level': 1}
        """
        validate_not_empty(player_id, "player_id")
        sheet = await self._load_sheet(player_id)
        return sheet.to_dict()

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def add_xp(self, player_id: str, skill: str, amount: int) -> Dict[str, Any]:
        """
        Add ``amount`` XP to ``skill``.

        Returns:
            Progress of the skill after the award plus ``previousLevel``,
            ``levelsGained`` and ``leveledUp``

        Raises:
            InvalidArgumentError: Empty ids, or negative/non-integer amount
            StorageError: Repository failure (state unchanged)
        """
        try:
            validate_not_empty(player_id, "player_id")
            validate_not_empty(skill, "skill")

            async with self._locks.hold(player_id):
                sheet = await self._load_sheet(player_id)
                update = add_xp(sheet.get(skill), amount)
                sheet = sheet.with_skill(skill, update.state)
                await self._skills.save(player_id, sheet)
        except Exception as e:
            self.log_error("add_xp", e, player_id=player_id, skill=skill, amount=amount)
            raise

        self.log_operation(
            "add_xp",
            player_id=player_id,
            skill=skill,
            amount=amount,
            xp=update.state.xp,
            level=update.progress.level,
        )
        await self._announce(player_id, skill, amount, update, sheet)
        return self._update_to_dict(skill, update)

    async def record_event(
        self,
        player_id: str,
        event: Union[XpEventType, str],
        value: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Award the track XP a gameplay event is worth.

        Args:
            player_id: Player who triggered the event
            event: Event type, e.g. ``"SKU_MINT"``
            value: Event value; only ``VOID_SWAP`` uses it

        Raises:
            InvalidArgumentError: Unknown event or bad value
        """
        try:
            award = xp_award_for_event(event, value)
        except Exception as e:
            self.log_error("record_event", e, player_id=player_id, event=str(event))
            raise

        result = await self.add_xp(player_id, award.track.value, award.amount)
        return {"event": XpEventType(event).value, "track": award.track.value, **result}

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _update_to_dict(skill: str, update: SkillUpdate) -> Dict[str, Any]:
        return {
            "skill": skill,
            **update.progress.to_dict(),
            "previousLevel": update.previous_level,
            "levelsGained": update.levels_gained,
            "leveledUp": update.leveled_up,
        }

    async def _announce(
        self,
        player_id: str,
        skill: str,
        amount: int,
        update: SkillUpdate,
        sheet: SkillSheet,
    ) -> None:
        await self.emit_event(
            "progression.xp_gained",
            {
                "player_id": player_id,
                "skill": skill,
                "amount": amount,
                "xp": update.state.xp,
                "level": update.progress.level,
                "total_xp": sheet.total_xp,
                "player_level": sheet.level,
            },
        )
        if update.leveled_up:
            await self.emit_event(
                "progression.level_up",
                {
                    "player_id": player_id,
                    "skill": skill,
                    "old_level": update.previous_level,
                    "new_level": update.progress.level,
                },
            )
