"""
VOID economy core.

Player economy and progression engine: XP leveling, skill tracks, VOID
staking with interest and a daily withdrawal cap, fee distribution across
economic sinks and category leaderboards.
"""

__version__ = "1.0.0"
