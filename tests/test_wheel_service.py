from __future__ import annotations

import asyncio
from datetime import date, timedelta
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from spinbot.core.catalog import PRIZES
from spinbot.core.progress import UserProgress
from spinbot.core.selector import RewardSelector
from spinbot.database import Database
from spinbot.database.models import LedgerRecord
from spinbot.database.repo.players import upsert_player
from spinbot.database.repo.progress_repo import load_progress, save_progress
from spinbot.database.repo.tasks_repo import mark_task_completed
from spinbot.services.wheel import WheelService
from tests.helpers import ConstantRandom, FixedClock

DAY = date(2026, 10, 19)

# r = 75 of 100 lands on "Try Again"; r = 50 lands on the 100-coin segment
TRY_AGAIN = 0.75
HUNDRED = 0.5


async def _setup(tmp_path: Path) -> tuple[Database, int]:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'spinbot.db'}")
    await db.init_models()
    async with db.session() as session:
        player = await upsert_player(session, telegram_id=42, username="lucky", first_name="Lu", last_name=None)
        await session.commit()
        return db, player.id


def _wheel(db: Database, *, roll: float = HUNDRED, clock: FixedClock | None = None) -> WheelService:
    return WheelService(db, selector=RewardSelector(ConstantRandom(roll)), clock=clock or FixedClock(DAY))


def test_spin_persists_and_reloads(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            res = await _wheel(db).spin(pid)
            assert res.ok and not res.locked
            assert res.prize == PRIZES[2]
            assert res.delta == 100
            assert res.persisted
            assert "+100 coins" in res.message

            ov = await _wheel(db).overview(pid)  # fresh service, loads from DB
            assert ov.progress.coin_balance == 350
            assert ov.progress.free_spins_remaining == 4
            assert ov.progress.experience == 30
            assert [e.amount for e in ov.entries] == [100]
        finally:
            await db.close()

    asyncio.run(scenario())


def test_spin_locked_without_free_spins(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            wheel = _wheel(db, roll=TRY_AGAIN)
            for _ in range(5):
                res = await wheel.spin(pid)
                assert res.ok and res.prize is not None and res.prize.label == "Try Again"

            res = await wheel.spin(pid)
            assert not res.ok and res.locked
            assert res.prize is None

            ov = await wheel.overview(pid)
            assert ov.progress.free_spins_remaining == 0
            assert ov.progress.coin_balance == 250
            assert ov.entries == ()
        finally:
            await db.close()

    asyncio.run(scenario())


def test_check_in_once_per_day(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        clock = FixedClock(DAY)
        try:
            wheel = _wheel(db, clock=clock)

            first = await wheel.check_in(pid)
            assert first.ok and not first.already
            assert first.reward == 10 and first.streak == 1

            again = await wheel.check_in(pid)
            assert again.already
            assert again.reward == 0
            assert again.progress is not None and again.progress.coin_balance == 260

            clock.day = DAY + timedelta(days=1)
            nxt = await wheel.check_in(pid)
            assert nxt.reward == 20 and nxt.streak == 2

            async with db.session() as session:
                stored = await load_progress(session, player_id=pid)
            assert stored is not None
            assert stored.last_check_in_date == DAY + timedelta(days=1)
            assert stored.free_spins_remaining == 9
        finally:
            await db.close()

    asyncio.run(scenario())


def test_task_completion_survives_restart(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            wheel = _wheel(db)
            res = await wheel.complete_task(pid, "1")
            assert res.ok and not res.already
            assert res.task is not None and res.task.completed
            assert res.progress is not None and res.progress.coin_balance == 300

            unknown = await wheel.complete_task(pid, "nope")
            assert not unknown.ok

            restarted = _wheel(db)
            again = await restarted.complete_task(pid, "1")
            assert again.already

            ov = await restarted.overview(pid)
            assert ov.progress.coin_balance == 300
            assert ov.progress.free_spins_remaining == 6
            assert [t.id for t in ov.tasks if t.completed] == ["1"]
        finally:
            await db.close()

    asyncio.run(scenario())


def test_withdraw_validation_and_payout(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            async with db.session() as session:
                await save_progress(session, player_id=pid, progress=UserProgress(coin_balance=60_000))
                await session.commit()

            wheel = _wheel(db)

            bad_tier = await wheel.withdraw(pid, amount=12_345, paytm_number="9876543210")
            assert not bad_tier.ok and "payout tiers" in bad_tier.message

            bad_number = await wheel.withdraw(pid, amount=10_000, paytm_number="12345")
            assert not bad_number.ok and "10-digit" in bad_number.message

            too_much = await wheel.withdraw(pid, amount=100_000, paytm_number="9876543210")
            assert not too_much.ok
            assert too_much.progress is not None and too_much.progress.coin_balance == 60_000

            ok = await wheel.withdraw(pid, amount=50_000, paytm_number="9876543210")
            assert ok.ok and ok.persisted
            assert ok.progress is not None and ok.progress.coin_balance == 10_000

            ov = await _wheel(db).overview(pid)
            assert ov.progress.coin_balance == 10_000
            assert len(ov.entries) == 1
            assert ov.entries[0].signed_amount == -50_000
        finally:
            await db.close()

    asyncio.run(scenario())


def test_stored_ledger_is_trimmed(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        clock = FixedClock(DAY)
        try:
            wheel = _wheel(db, clock=clock)
            for i in range(12):
                clock.day = DAY + timedelta(days=i)
                await wheel.check_in(pid)

            async with db.session() as session:
                rows = await session.scalar(
                    select(func.count()).select_from(LedgerRecord).where(LedgerRecord.player_id == pid)
                )
            assert rows == 10

            ov = await _wheel(db).overview(pid)
            assert [e.timestamp for e in ov.entries] == [DAY + timedelta(days=i) for i in range(11, 1, -1)]
        finally:
            await db.close()

    asyncio.run(scenario())


def test_persistence_failure_does_not_block(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken_save(*args, **kwargs) -> None:
        raise SQLAlchemyError("disk full")

    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            wheel = _wheel(db)
            await wheel.overview(pid)  # load before breaking the save path

            monkeypatch.setattr("spinbot.services.wheel.save_progress", broken_save)

            first = await wheel.spin(pid)
            second = await wheel.spin(pid)
            assert first.ok and not first.persisted
            assert second.ok and not second.persisted

            ov = await wheel.overview(pid)
            assert ov.progress.coin_balance == 450
            assert ov.progress.free_spins_remaining == 3
        finally:
            await db.close()

    asyncio.run(scenario())


def test_failed_task_marker_is_rewritten_by_next_save(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {"n": 0}

    async def flaky_mark(session, *, player_id: int, task_id: str) -> bool:
        calls["n"] += 1
        if calls["n"] == 1:
            raise SQLAlchemyError("database is locked")
        return await mark_task_completed(session, player_id=player_id, task_id=task_id)

    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            wheel = _wheel(db)
            monkeypatch.setattr("spinbot.services.wheel.mark_task_completed", flaky_mark)

            done = await wheel.complete_task(pid, "3")
            assert done.ok and not done.already and not done.persisted
            assert done.progress is not None and done.progress.coin_balance == 750

            res = await wheel.spin(pid)
            assert res.persisted
            assert res.progress is not None and res.progress.coin_balance == 850

            restarted = _wheel(db)
            again = await restarted.complete_task(pid, "3")
            assert again.already
            assert again.progress is not None and again.progress.coin_balance == 850

            ov = await restarted.overview(pid)
            assert [e.amount for e in ov.entries] == [100, 500]
            assert next(t for t in ov.tasks if t.id == "3").completed
        finally:
            await db.close()

    asyncio.run(scenario())


def test_failed_ledger_rows_are_written_by_next_save(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken_save(*args, **kwargs) -> None:
        raise SQLAlchemyError("disk full")

    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        try:
            wheel = _wheel(db)
            await wheel.overview(pid)

            monkeypatch.setattr("spinbot.services.wheel.save_progress", broken_save)
            first = await wheel.spin(pid)
            assert not first.persisted

            monkeypatch.setattr("spinbot.services.wheel.save_progress", save_progress)
            check = await wheel.check_in(pid)
            assert check.persisted

            ov = await _wheel(db).overview(pid)
            assert ov.progress.coin_balance == 360
            assert [e.amount for e in ov.entries] == [10, 100]
        finally:
            await db.close()

    asyncio.run(scenario())


def test_idle_players_are_evicted_and_reloaded(tmp_path: Path) -> None:
    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        async with db.session() as session:
            other = await upsert_player(session, telegram_id=43, username="other", first_name="Ot", last_name=None)
            await session.commit()
            other_id = other.id

        try:
            wheel = WheelService(
                db,
                selector=RewardSelector(ConstantRandom(HUNDRED)),
                clock=FixedClock(DAY),
                max_players=1,
            )
            await wheel.spin(pid)
            await wheel.overview(other_id)  # pushes the first player out

            # written behind the service's back; only visible after a reload
            async with db.session() as session:
                await save_progress(session, player_id=pid, progress=UserProgress(coin_balance=9_000))
                await session.commit()

            ov = await wheel.overview(pid)
            assert ov.progress.coin_balance == 9_000
        finally:
            await db.close()

    asyncio.run(scenario())


def test_players_with_unsaved_writes_are_not_evicted(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken_save(*args, **kwargs) -> None:
        raise SQLAlchemyError("disk full")

    async def scenario() -> None:
        db, pid = await _setup(tmp_path)
        async with db.session() as session:
            other = await upsert_player(session, telegram_id=43, username="other", first_name="Ot", last_name=None)
            await session.commit()
            other_id = other.id

        try:
            wheel = WheelService(
                db,
                selector=RewardSelector(ConstantRandom(HUNDRED)),
                clock=FixedClock(DAY),
                max_players=1,
            )
            await wheel.overview(pid)

            monkeypatch.setattr("spinbot.services.wheel.save_progress", broken_save)
            res = await wheel.spin(pid)
            assert not res.persisted
            monkeypatch.setattr("spinbot.services.wheel.save_progress", save_progress)

            await wheel.overview(other_id)

            ov = await wheel.overview(pid)
            assert ov.progress.coin_balance == 350
            assert [e.amount for e in ov.entries] == [100]
        finally:
            await db.close()

    asyncio.run(scenario())
