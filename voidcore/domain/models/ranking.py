"""
Leaderboard ranking domain model.

Purpose
-------
Maintain, per category, a total order of players by score and answer point
(`rank_of`) and range (`top_n`, `page`) rank queries.

Responsibilities
----------------
- Order players by ``(score desc, player_id asc)`` so ties resolve the same
  way every time
- Remember each player's previous rank to report rank movement
- Serialize concurrent writers so every upsert is linearizable per category

Non-Responsibilities
--------------------
- Persistence of boards (boards are rebuilt from scores by the caller)
- Display formatting of values

Design Notes
------------
Each category board keeps a `sortedcontainers.SortedList` of
``(-score, player_id)`` keys, so inserts, removals and rank lookups are
O(log n), plus a score map for O(1) membership. Readers take
the same lock as writers and copy the slice they need before yielding, so a
range query reflects one consistent state even if writes land while the
caller is still iterating.

Usage Example
-------------
>>> rankings = RankingService()
>>> rankings.upsert("level", "alice", 9850)
>>> rankings.upsert("level", "bob", 9720)
>>> rankings.rank_of("level", "bob").rank
2
>>> [e.player_id for e in rankings.top_n("level", 10)]
['alice', 'bob']
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Union

from sortedcontainers import SortedList

from voidcore.domain.exceptions import InvalidArgumentError, NotFoundError
from voidcore.domain.models.base import validate_int, validate_non_negative, validate_not_empty

Score = Union[int, float]

CATEGORY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,49}$")

# Categories the game front end knows how to display.
KNOWN_CATEGORIES = (
    "level",
    "wealth",
    "casino-wins",
    "achievements",
    "quests",
    "social",
    "pvp",
    "pve",
    "crafting",
)


def validate_category(category: str) -> str:
    """Reject category names the API layer could not have meant."""
    if not isinstance(category, str) or not CATEGORY_PATTERN.match(category):
        raise InvalidArgumentError(
            "category", f"malformed category {category!r}"
        )
    return category


# ============================================================================
# VALUE OBJECTS
# ============================================================================


@dataclass(frozen=True)
class RankingEntry:
    """One row of a leaderboard. ``change`` is previous rank minus current rank."""

    player_id: str
    category: str
    score: Score
    rank: int = 0
    change: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "userId": self.player_id,
            "value": self.score,
            "change": self.change,
            "category": self.category,
        }


@dataclass(frozen=True)
class RankSnapshot:
    """
    A player's current position in one category.

    Attributes
    ----------
    rank : int
        1-based rank
    score : Score
        Current score
    change : int
        Previous rank minus current rank; positive means the player climbed
    """

    player_id: str
    category: str
    rank: int
    score: Score
    change: int

    def to_dict(self) -> Dict[str, Any]:
        """External shape of the current-rank endpoint."""
        return {
            "rank": self.rank,
            "value": self.score,
            "change": self.change,
            "category": self.category,
        }


# ============================================================================
# CATEGORY BOARD
# ============================================================================


@dataclass
class _Board:
    keys: SortedList = field(default_factory=SortedList)
    scores: Dict[str, Score] = field(default_factory=dict)
    previous_ranks: Dict[str, int] = field(default_factory=dict)

    def rank(self, player_id: str) -> int:
        return self.keys.bisect_left((-self.scores[player_id], player_id)) + 1

    def discard(self, player_id: str) -> None:
        score = self.scores.pop(player_id)
        self.keys.remove((-score, player_id))


class RankingService:
    """
    Thread-safe per-category rankings.

    Public Methods
    --------------
    - upsert() -> Insert or update a player's score
    - rank_of() -> Rank, score and movement of one player
    - top_n() -> Lazy sequence of the best n entries
    - page() -> Entries for an offset/limit window
    - snapshot() -> Rebase every player's previous rank to the current one
    - remove() / remove_player() -> Drop players from boards
    """

    def __init__(self) -> None:
        self._boards: Dict[str, _Board] = {}
        self._lock = threading.RLock()

    # ========================================================================
    # WRITES
    # ========================================================================

    def upsert(self, category: str, player_id: str, score: Score) -> None:
        """
        Insert or update ``player_id``'s score in ``category``.

        The player's rank just before this write becomes their previous rank,
        so `rank_of` reports how far this score moved them.

        Raises:
            InvalidArgumentError: Malformed category, empty player id or
                non-numeric score
        """
        validate_category(category)
        validate_not_empty(player_id, "player_id")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise InvalidArgumentError("score", f"must be a number, got {score!r}")
        if score != score:
            raise InvalidArgumentError("score", "must not be NaN")

        with self._lock:
            board = self._boards.setdefault(category, _Board())
            if player_id in board.scores:
                board.previous_ranks[player_id] = board.rank(player_id)
                board.discard(player_id)
            board.scores[player_id] = score
            board.keys.add((-score, player_id))

    def snapshot(self, category: str) -> None:
        """Record every player's current rank as their previous rank."""
        validate_category(category)
        with self._lock:
            board = self._boards.get(category)
            if board is None:
                return
            board.previous_ranks = {
                player_id: index + 1 for index, (_, player_id) in enumerate(board.keys)
            }

    def remove(self, category: str, player_id: str) -> bool:
        """Remove a player from one category. Returns False if absent."""
        validate_category(category)
        with self._lock:
            board = self._boards.get(category)
            if board is None or player_id not in board.scores:
                return False
            board.discard(player_id)
            board.previous_ranks.pop(player_id, None)
            if not board.scores:
                del self._boards[category]
            return True

    def remove_player(self, player_id: str) -> int:
        """Remove a player from every category. Returns how many boards changed."""
        with self._lock:
            return sum(self.remove(category, player_id) for category in list(self._boards))

    # ========================================================================
    # READS
    # ========================================================================

    def rank_of(self, category: str, player_id: str) -> RankSnapshot:
        """
        Current rank, score and movement of ``player_id``.

        Raises:
            InvalidArgumentError: Malformed category
            NotFoundError: Unknown category, or player not ranked in it
        """
        validate_category(category)
        with self._lock:
            board = self._boards.get(category)
            if board is None:
                raise NotFoundError("Category", category)
            if player_id not in board.scores:
                raise NotFoundError("RankingEntry", f"player_id={player_id}, category={category}")

            rank = board.rank(player_id)
            previous = board.previous_ranks.get(player_id)
            return RankSnapshot(
                player_id=player_id,
                category=category,
                rank=rank,
                score=board.scores[player_id],
                change=0 if previous is None else previous - rank,
            )

    def top_n(self, category: str, n: int) -> Iterator[RankingEntry]:
        """
        Lazily yield at most ``n`` best entries of ``category``.

        Each call returns a fresh generator over the state at the moment
        iteration starts; an unknown category yields nothing.
        """
        validate_category(category)
        validate_int(n, "n")
        validate_non_negative(n, "n")
        return self._iter_window(category, 0, n)

    def page(self, category: str, offset: int, limit: int) -> List[RankingEntry]:
        """Entries ranked ``offset + 1`` to ``offset + limit``."""
        validate_category(category)
        validate_int(offset, "offset")
        validate_non_negative(offset, "offset")
        validate_int(limit, "limit")
        validate_non_negative(limit, "limit")
        return list(self._iter_window(category, offset, limit))

    def size(self, category: str) -> int:
        validate_category(category)
        with self._lock:
            board = self._boards.get(category)
            return len(board.keys) if board else 0

    def categories(self) -> List[str]:
        with self._lock:
            return sorted(self._boards)

    def _iter_window(self, category: str, offset: int, limit: int) -> Iterator[RankingEntry]:
        with self._lock:
            board = self._boards.get(category)
            if board is None:
                return
            window = list(board.keys.islice(offset, offset + limit))
            previous = {player_id: board.previous_ranks.get(player_id) for _, player_id in window}

        for index, (neg_score, player_id) in enumerate(window):
            rank = offset + index + 1
            before = previous[player_id]
            yield RankingEntry(
                player_id=player_id,
                category=category,
                score=-neg_score,
                rank=rank,
                change=0 if before is None else before - rank,
            )
