# spinbot/database/tx.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def transactional(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Commit-or-rollback unit for one persistence step.

    Nests as a SAVEPOINT when the session already has a transaction open
    (SQLAlchemy 2.x autobegin), otherwise opens a fresh one.
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield session
    else:
        async with session.begin():
            yield session
