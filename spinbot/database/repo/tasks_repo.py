# spinbot/database/repo/tasks_repo.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from spinbot.database.models import PlayerTask


async def completed_task_ids(session: AsyncSession, *, player_id: int) -> set[str]:
    res = await session.execute(select(PlayerTask.task_id).where(PlayerTask.player_id == player_id))
    return {row[0] for row in res.all()}


async def mark_task_completed(session: AsyncSession, *, player_id: int, task_id: str) -> bool:
    """
    Returns False if the marker already existed.
    Uses a SAVEPOINT so a duplicate does not roll back the surrounding transaction.
    """
    try:
        async with session.begin_nested():
            session.add(PlayerTask(player_id=player_id, task_id=task_id))
            await session.flush()
    except IntegrityError:
        return False
    return True
