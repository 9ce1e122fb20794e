"""
Leaderboard service.

Purpose
-------
Expose the in-memory `RankingService` as async service calls with paging
limits from config, logging and ``leaderboard.score_updated`` events.

Design Notes
------------
Boards live in memory and are rebuilt by resubmitting scores; nothing here
is persisted. `subscribe_to_progression` keeps the ``level`` board (total
track XP) and the ``crafting`` board (crafting XP) in step with the skill
service without the two services knowing each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from voidcore.core.event.types import EventPayload, ListenerPriority
from voidcore.domain.models.base import validate_int, validate_non_negative
from voidcore.domain.models.ranking import RankingService, Score
from voidcore.domain.models.skill import CRAFTING_SKILL, XpTrack
from voidcore.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from logging import Logger

    from voidcore.core.config.manager import ConfigManager
    from voidcore.core.event.bus import EventBus

LEVEL_CATEGORY = "level"


class LeaderboardService(BaseService):
    """
    Service for competitive rankings.

    Public Methods
    --------------
    - submit_score() -> Insert or update a player's score
    - get_current_rank() -> {rank, value, change, category}
    - get_leaderboard() -> One page of a category
    - refresh_snapshot() -> Rebase rank movement to the current order
    - remove_player() -> Drop a player from every board
    - subscribe_to_progression() -> Mirror XP gains into the boards
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        rankings: Optional[RankingService] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._rankings = rankings or RankingService()

    @property
    def rankings(self) -> RankingService:
        return self._rankings

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def submit_score(self, category: str, player_id: str, score: Score) -> Dict[str, Any]:
        """
        Insert or update ``player_id``'s score and return their new position.

        ``change`` in the result compares against the rank the player held
        just before this submission.

        Raises:
            InvalidArgumentError: Malformed category, empty player id, bad score
        """
        try:
            self._rankings.upsert(category, player_id, score)
            snapshot = self._rankings.rank_of(category, player_id)
        except Exception as e:
            self.log_error(
                "submit_score", e, player_id=player_id, category=category, score=repr(score)
            )
            raise

        self.log_operation(
            "submit_score",
            player_id=player_id,
            category=category,
            score=score,
            rank=snapshot.rank,
            change=snapshot.change,
        )
        await self.emit_event(
            "leaderboard.score_updated",
            {"player_id": player_id, **snapshot.to_dict()},
        )
        return snapshot.to_dict()

    async def refresh_snapshot(self, category: Optional[str] = None) -> List[str]:
        """
        Make every player's current rank their previous rank.

        Run it on the cadence movement should be measured over (e.g. daily).
        Without ``category`` every board is refreshed.

        Returns:
            Categories that were refreshed
        """
        categories = [category] if category is not None else self._rankings.categories()
        for name in categories:
            self._rankings.snapshot(name)
        self.log_operation("refresh_snapshot", categories=categories)
        return categories

    async def remove_player(self, player_id: str) -> int:
        """Remove ``player_id`` from every board. Returns the number of boards changed."""
        removed = self._rankings.remove_player(player_id)
        self.log_operation("remove_player", player_id=player_id, boards=removed)
        return removed

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_current_rank(self, category: str, player_id: str) -> Dict[str, Any]:
        """
        Rank, value and movement of one player.

        Raises:
            NotFoundError: Unknown category or unranked player
        """
        return self._rankings.rank_of(category, player_id).to_dict()

    async def get_leaderboard(
        self, category: str, limit: Optional[int] = None, offset: int = 0
    ) -> List[Dict[str, Any]]:
        """
        One page of ``category``, best first.

        ``limit`` defaults to ``leaderboard.default_page_size`` and is capped
        at ``leaderboard.max_page_size``. An unknown category is an empty page.

        Raises:
            InvalidArgumentError: Negative or non-integer limit/offset
        """
        max_page = int(self.get_config("leaderboard.max_page_size", 100))
        if limit is None:
            limit = int(self.get_config("leaderboard.default_page_size", 10))
        validate_int(limit, "limit")
        validate_non_negative(limit, "limit")

        entries = self._rankings.page(category, offset, min(limit, max_page))
        return [entry.to_dict() for entry in entries]

    # ========================================================================
    # Progression sync
    # ========================================================================

    def subscribe_to_progression(self) -> str:
        """Mirror ``progression.xp_gained`` into the level and crafting boards."""
        return self._events.subscribe(
            "progression.xp_gained",
            self._on_xp_gained,
            priority=ListenerPriority.HIGH,
            identifier="leaderboard.sync_progression",
        )

    async def _on_xp_gained(self, payload: EventPayload) -> None:
        player_id = payload["player_id"]
        skill = payload["skill"]
        tracks = set(self.get_config("progression.tracks", [t.value for t in XpTrack]))

        if skill in tracks:
            await self.submit_score(LEVEL_CATEGORY, player_id, payload["total_xp"])
        elif skill == CRAFTING_SKILL:
            await self.submit_score(CRAFTING_SKILL, player_id, payload["xp"])
