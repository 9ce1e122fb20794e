"""Competitive leaderboards."""

from voidcore.modules.leaderboard.service import LeaderboardService

__all__ = ["LeaderboardService"]
