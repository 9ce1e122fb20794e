"""
PlayerSkillRow: stored XP per (player, skill).
Schema only.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from voidcore.core.database.base import Base, TimestampMixin


class PlayerSkillRow(Base, TimestampMixin):
    """
    One skill of one player.

    Only XP is stored; level and progress are derived on read.
    """

    __tablename__ = "player_skills"
    __table_args__ = (Index("ix_player_skills_skill_xp", "skill", "xp"),)

    player_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    skill: Mapped[str] = mapped_column(String(64), primary_key=True)
    xp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
