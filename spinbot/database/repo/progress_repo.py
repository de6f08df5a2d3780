# spinbot/database/repo/progress_repo.py
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from spinbot.core.progress import LEDGER_WINDOW, LedgerEntry, UserProgress
from spinbot.database.models import LedgerRecord, PlayerProgress


def _to_progress(row: PlayerProgress) -> UserProgress:
    return UserProgress(
        coin_balance=int(row.coin_balance),
        gem_balance=int(row.gem_balance),
        level=int(row.level),
        experience=int(row.experience),
        free_spins_remaining=int(row.free_spins_remaining),
        last_check_in_date=row.last_check_in_date,
        check_in_streak=int(row.check_in_streak),
    )


def _to_entry(row: LedgerRecord) -> LedgerEntry:
    return LedgerEntry(
        id=row.entry_id,
        amount=int(row.amount),
        direction=row.direction,
        description=row.description,
        timestamp=row.day,
    )


async def load_progress(session: AsyncSession, *, player_id: int) -> UserProgress | None:
    """
    None when the player never had progress saved (caller uses defaults).
    """
    row = await session.scalar(select(PlayerProgress).where(PlayerProgress.player_id == player_id))
    return _to_progress(row) if row is not None else None


async def load_recent_entries(session: AsyncSession, *, player_id: int, limit: int = LEDGER_WINDOW) -> list[LedgerEntry]:
    """Newest first."""
    res = await session.execute(
        select(LedgerRecord)
        .where(LedgerRecord.player_id == player_id)
        .order_by(LedgerRecord.id.desc())
        .limit(limit)
    )
    return [_to_entry(r) for r in res.scalars().all()]


async def save_progress(session: AsyncSession, *, player_id: int, progress: UserProgress) -> None:
    values = dict(
        coin_balance=progress.coin_balance,
        gem_balance=progress.gem_balance,
        level=progress.level,
        experience=progress.experience,
        free_spins_remaining=progress.free_spins_remaining,
        last_check_in_date=progress.last_check_in_date,
        check_in_streak=progress.check_in_streak,
    )
    # upsert on player_id (SQLite ON CONFLICT)
    stmt = sqlite_insert(PlayerProgress).values(player_id=player_id, **values).on_conflict_do_update(
        index_elements=["player_id"],
        set_=values,
    )
    await session.execute(stmt)


async def append_entry(session: AsyncSession, *, player_id: int, entry: LedgerEntry, keep: int = LEDGER_WINDOW) -> None:
    """
    Insert the entry, then drop everything older than the newest `keep` rows.
    """
    session.add(
        LedgerRecord(
            entry_id=entry.id,
            player_id=player_id,
            amount=entry.amount,
            direction=entry.direction,
            description=entry.description,
            day=entry.timestamp,
        )
    )
    await session.flush()

    newest = (
        select(LedgerRecord.id)
        .where(LedgerRecord.player_id == player_id)
        .order_by(LedgerRecord.id.desc())
        .limit(keep)
    )
    await session.execute(
        delete(LedgerRecord).where(
            LedgerRecord.player_id == player_id,
            LedgerRecord.id.not_in(newest),
        ).execution_options(synchronize_session=False)
    )
