"""
SQLAlchemy storage for skill sheets.

A `SkillSheet` is spread over one ``player_skills`` row per skill. Saving
upserts every skill on the sheet inside one transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from voidcore.core.database.service import DatabaseService
from voidcore.core.exceptions import StorageError
from voidcore.core.logging.logger import get_logger
from voidcore.database.models.progression import PlayerSkillRow
from voidcore.domain.models.skill import SkillSheet

logger = get_logger(__name__)


class SqlAlchemySkillRepository:
    """`StateRepository[SkillSheet]` backed by the ``player_skills`` table."""

    def __init__(self, database: DatabaseService) -> None:
        self._db = database

    async def load(self, player_id: str) -> Optional[SkillSheet]:
        try:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(PlayerSkillRow).where(PlayerSkillRow.player_id == player_id)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError("load", player_id, exc) from exc

        logger.debug(
            "Repository.load: PlayerSkillRow",
            extra={"player_id": player_id, "found": len(rows)},
        )
        if not rows:
            return None
        return SkillSheet(xp_by_skill={row.skill: row.xp for row in rows})

    async def save(self, player_id: str, state: SkillSheet) -> None:
        try:
            async with self._db.get_transaction() as session:
                result = await session.execute(
                    select(PlayerSkillRow)
                    .where(PlayerSkillRow.player_id == player_id)
                    .with_for_update()
                )
                existing = {row.skill: row for row in result.scalars().all()}

                for skill, xp in state.xp_by_skill.items():
                    row = existing.get(skill)
                    if row is None:
                        session.add(PlayerSkillRow(player_id=player_id, skill=skill, xp=xp))
                    else:
                        row.xp = xp
        except SQLAlchemyError as exc:
            raise StorageError("save", player_id, exc) from exc
