"""XP and level progression."""

from voidcore.modules.progression.repository import SqlAlchemySkillRepository
from voidcore.modules.progression.service import SkillService

__all__ = ["SkillService", "SqlAlchemySkillRepository"]
