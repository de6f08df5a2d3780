# spinbot/services/wheel.py
from __future__ import annotations

import asyncio
import logging
import re
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import AsyncIterator, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from spinbot.core.catalog import PRIZES, WITHDRAWAL_OPTIONS, PrizeEntry, PrizeKind, TaskRecord, withdrawal_option
from spinbot.core.errors import InsufficientFunds
from spinbot.core.progress import (
    LEDGER_WINDOW,
    LedgerEntry,
    ProgressLedger,
    Transition,
    UserProgress,
    check_in_reward,
)
from spinbot.core.selector import RewardSelector, validate_catalog
from spinbot.database.repo.progress_repo import append_entry, load_progress, load_recent_entries, save_progress
from spinbot.database.repo.tasks_repo import completed_task_ids, mark_task_completed
from spinbot.database.session import Database
from spinbot.database.tx import transactional
from spinbot.services.tasks import TaskRegistry
from spinbot.utils.dt import CheckInClock

log = logging.getLogger(__name__)

PAYTM_NUMBER_RE = re.compile(r"^\d{10}$")


class Clock(Protocol):
    def today(self) -> date: ...


@dataclass(frozen=True, slots=True)
class SpinResult:
    ok: bool
    locked: bool
    message: str
    prize: PrizeEntry | None = None
    progress: UserProgress | None = None
    delta: int = 0
    persisted: bool = True


@dataclass(frozen=True, slots=True)
class CheckinResult:
    ok: bool
    already: bool
    message: str
    reward: int = 0
    streak: int = 0
    progress: UserProgress | None = None
    persisted: bool = True


@dataclass(frozen=True, slots=True)
class TaskResult:
    ok: bool
    already: bool
    message: str
    task: TaskRecord | None = None
    progress: UserProgress | None = None
    persisted: bool = True


@dataclass(frozen=True, slots=True)
class WithdrawResult:
    ok: bool
    message: str
    progress: UserProgress | None = None
    persisted: bool = True


@dataclass(frozen=True, slots=True)
class PlayerOverview:
    progress: UserProgress
    entries: tuple[LedgerEntry, ...]
    tasks: tuple[TaskRecord, ...]
    checked_in_today: bool


@dataclass(slots=True)
class _PlayerSlot:
    ledger: ProgressLedger
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    # writes from failed saves, replayed by the next successful one
    pending_entries: list[LedgerEntry] = field(default_factory=list)
    pending_tasks: set[str] = field(default_factory=set)
    users: int = 0

    @property
    def idle(self) -> bool:
        return self.users == 0 and not self.pending_entries and not self.pending_tasks


class WheelService:
    """
    Glue between the reward engine and the outside world.

    Keeps one ProgressLedger per player in memory (loaded on first use),
    serializes each player's operations with a per-player lock, applies
    the gating the engine leaves to its caller (spins left, one check-in
    per day, payout tiers) and persists the post-transition state.

    A failed save is logged and reported via `persisted=False`. The
    in-memory state stays authoritative: the ledger rows and task markers
    of the failed save stay pending on the player's slot and are written
    together with the next successful snapshot.

    At most `max_players` players are cached. The least recently used idle
    players are dropped (and reloaded from the database on their next
    request); players with an operation in flight or unsaved writes stay.
    """

    def __init__(
        self,
        db: Database,
        *,
        selector: RewardSelector | None = None,
        catalog: Sequence[PrizeEntry] = PRIZES,
        tasks: TaskRegistry | None = None,
        clock: Clock | None = None,
        max_players: int = 1000,
    ) -> None:
        validate_catalog(catalog)
        if max_players < 1:
            raise ValueError("max_players must be >= 1")

        self.db = db
        self.selector = selector or RewardSelector()
        self.catalog = tuple(catalog)
        self.tasks = tasks or TaskRegistry()
        self.clock: Clock = clock or CheckInClock()
        self.max_players = max_players

        self._slots: OrderedDict[int, _PlayerSlot] = OrderedDict()
        self._slots_lock = asyncio.Lock()

    # -------------------------------------------------
    # loading / persistence
    # -------------------------------------------------

    async def _slot(self, player_id: int) -> _PlayerSlot:
        async with self._slots_lock:
            slot = self._slots.get(player_id)
            if slot is not None:
                self._slots.move_to_end(player_id)
                slot.users += 1
                return slot

            async with self.db.session() as session:
                progress = await load_progress(session, player_id=player_id)
                entries = await load_recent_entries(session, player_id=player_id)
                done = await completed_task_ids(session, player_id=player_id)

            if progress is None:
                log.info("New player %s, starting from default progress", player_id)

            self.tasks.load(player_id, done)
            slot = _PlayerSlot(ledger=ProgressLedger(progress, entries, today=self.clock.today))
            slot.users += 1
            self._slots[player_id] = slot
            self._evict()
            return slot

    def _evict(self) -> None:
        # caller holds _slots_lock
        excess = len(self._slots) - self.max_players
        if excess <= 0:
            return

        for pid in [pid for pid, slot in self._slots.items() if slot.idle][:excess]:
            del self._slots[pid]
            self.tasks.forget(pid)
            log.debug("Evicted player %s from cache", pid)

    @asynccontextmanager
    async def _locked(self, player_id: int) -> AsyncIterator[_PlayerSlot]:
        slot = await self._slot(player_id)
        try:
            async with slot.lock:
                yield slot
        finally:
            slot.users -= 1

    async def _persist(
        self,
        player_id: int,
        slot: _PlayerSlot,
        transition: Transition,
        *,
        task_id: str | None = None,
    ) -> bool:
        if transition.entry is not None:
            slot.pending_entries.append(transition.entry)
            # older rows would be trimmed from the stored window anyway
            del slot.pending_entries[:-LEDGER_WINDOW]
        if task_id is not None:
            slot.pending_tasks.add(task_id)

        try:
            async with self.db.session() as session:
                async with transactional(session):
                    await save_progress(session, player_id=player_id, progress=transition.progress)
                    for entry in slot.pending_entries:
                        await append_entry(session, player_id=player_id, entry=entry)
                    for pending_task in sorted(slot.pending_tasks):
                        await mark_task_completed(session, player_id=player_id, task_id=pending_task)
        except SQLAlchemyError:
            log.exception(
                "Failed to persist progress for player %s (%d entries, %d tasks pending)",
                player_id,
                len(slot.pending_entries),
                len(slot.pending_tasks),
            )
            return False

        slot.pending_entries.clear()
        slot.pending_tasks.clear()
        return True

    # -------------------------------------------------
    # reads
    # -------------------------------------------------

    async def overview(self, player_id: int) -> PlayerOverview:
        async with self._locked(player_id) as slot:
            progress = slot.ledger.progress
            return PlayerOverview(
                progress=progress,
                entries=slot.ledger.entries,
                tasks=tuple(self.tasks.tasks_for(player_id)),
                checked_in_today=progress.last_check_in_date == self.clock.today(),
            )

    # -------------------------------------------------
    # operations
    # -------------------------------------------------

    async def spin(self, player_id: int) -> SpinResult:
        async with self._locked(player_id) as slot:
            cur = slot.ledger.progress
            if cur.free_spins_remaining <= 0:
                return SpinResult(
                    ok=False,
                    locked=True,
                    progress=cur,
                    message=(
                        "🎰 <b>No spins left</b>\n"
                        "Check in daily (+2 spins) or complete a task (+1 spin) to earn more.\n\n"
                        "Run /tasks to see what's open."
                    ),
                )

            prize = self.selector.draw(self.catalog)
            tr = slot.ledger.apply_spin_result(prize)
            persisted = await self._persist(player_id, slot, tr)

        log.info("Player %s spun prize %s (%s)", player_id, prize.id, prize.label)

        return SpinResult(
            ok=True,
            locked=False,
            prize=prize,
            progress=tr.progress,
            delta=tr.delta,
            persisted=persisted,
            message=_spin_message(prize, tr.progress),
        )

    async def check_in(self, player_id: int) -> CheckinResult:
        async with self._locked(player_id) as slot:
            cur = slot.ledger.progress
            today = self.clock.today()

            if cur.last_check_in_date == today:
                return CheckinResult(
                    ok=True,
                    already=True,
                    streak=cur.check_in_streak,
                    progress=cur,
                    message=(
                        "✅ <b>Already checked in today</b>\n"
                        f"• Streak: <b>{cur.check_in_streak}</b>\n"
                        f"• Tomorrow: <b>+{check_in_reward(cur.check_in_streak)}</b> coins\n\n"
                        "Come back tomorrow."
                    ),
                )

            tr = slot.ledger.apply_daily_check_in(today)
            persisted = await self._persist(player_id, slot, tr)

        return CheckinResult(
            ok=True,
            already=False,
            reward=tr.delta,
            streak=tr.progress.check_in_streak,
            progress=tr.progress,
            persisted=persisted,
            message=(
                "🔥 <b>Check-in successful!</b>\n"
                f"• +<b>{tr.delta}</b> coins\n"
                "• +<b>2</b> bonus spins\n"
                f"• Streak: <b>{tr.progress.check_in_streak}</b>"
            ),
        )

    async def complete_task(self, player_id: int, task_id: str) -> TaskResult:
        async with self._locked(player_id) as slot:
            task = self.tasks.get(player_id, task_id)
            if task is None:
                return TaskResult(ok=False, already=False, message="❌ Unknown task.")

            done = slot.ledger.apply_task_completion(task)
            if done.already:
                return TaskResult(
                    ok=True,
                    already=True,
                    task=task,
                    progress=done.transition.progress,
                    message=f"✅ <b>{task.title}</b> is already completed.",
                )

            self.tasks.mark_completed(player_id, task_id)
            tr = done.transition
            persisted = await self._persist(player_id, slot, tr, task_id=task_id)

        return TaskResult(
            ok=True,
            already=False,
            task=done.task,
            progress=tr.progress,
            persisted=persisted,
            message=(
                f"🎯 <b>{task.title}</b> completed!\n"
                f"• +<b>{task.reward}</b> coins\n"
                "• +<b>1</b> bonus spin"
            ),
        )

    async def withdraw(self, player_id: int, *, amount: int, paytm_number: str) -> WithdrawResult:
        opt = withdrawal_option(amount)
        if opt is None:
            tiers = " / ".join(f"{o.coins:,} ({o.cash})" for o in WITHDRAWAL_OPTIONS)
            return WithdrawResult(ok=False, message=f"❌ Choose one of the payout tiers: {tiers}")

        number = paytm_number.strip()
        if not PAYTM_NUMBER_RE.match(number):
            return WithdrawResult(ok=False, message="❌ Please enter a valid 10-digit Paytm number")

        async with self._locked(player_id) as slot:
            try:
                tr = slot.ledger.apply_withdrawal(amount, f"Paytm {number}")
            except InsufficientFunds as e:
                log.info("Refused withdrawal for player %s: balance=%s amount=%s", player_id, e.balance, e.amount)
                return WithdrawResult(
                    ok=False,
                    progress=slot.ledger.progress,
                    message=(
                        "❌ <b>Not enough coins</b>\n"
                        f"You have <b>{e.balance:,}</b>, this payout needs <b>{e.amount:,}</b>."
                    ),
                )
            persisted = await self._persist(player_id, slot, tr)

        return WithdrawResult(
            ok=True,
            progress=tr.progress,
            persisted=persisted,
            message=(
                f"💸 Redemption request for <b>{opt.cash}</b> submitted for Paytm number <b>{number}</b>.\n"
                "Processing takes 24-48 hours."
            ),
        )


def _spin_message(prize: PrizeEntry, progress: UserProgress) -> str:
    if prize.kind == PrizeKind.EMPTY:
        head = "😅 <b>No luck this time.</b>"
    elif prize.kind == PrizeKind.GEMS:
        head = f"💎 <b>{prize.value} gems</b> spotted! Gems can't be collected yet."
    elif prize.label == "JACKPOT":
        head = f"💸 <b>JACKPOT!</b>\nYou won <b>+{prize.value}</b> coins!"
    else:
        head = f"🎉 <b>You won +{prize.value} coins!</b>"

    return (
        f"{head}\n"
        f"• Balance: <b>{progress.coin_balance:,}</b>\n"
        f"• Spins left: <b>{progress.free_spins_remaining}</b>"
    )
