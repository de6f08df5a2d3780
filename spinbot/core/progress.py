# spinbot/core/progress.py
from __future__ import annotations

import enum
import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Iterable

from spinbot.core.catalog import DAILY_REWARDS, PrizeEntry, PrizeKind, TaskRecord
from spinbot.core.errors import ContractViolation, InsufficientFunds, NoSpinsLeft

log = logging.getLogger(__name__)

LEDGER_WINDOW = 10

SPIN_EXPERIENCE = 10
CHECK_IN_BONUS_SPINS = 2
TASK_BONUS_SPINS = 1


class LedgerDirection(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TaskCompletionStatus(str, enum.Enum):
    COMPLETED = "completed"
    ALREADY_COMPLETED = "already_completed"


@dataclass(frozen=True, slots=True)
class UserProgress:
    """
    Snapshot of a player's progression. Never mutated in place; every
    transition builds a new instance.

    `level` and `gem_balance` are carried and persisted but no transition
    changes them yet.
    """
    coin_balance: int = 250
    gem_balance: int = 0
    level: int = 1
    experience: int = 20
    free_spins_remaining: int = 5
    last_check_in_date: date | None = None
    check_in_streak: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "coin_balance": self.coin_balance,
            "gem_balance": self.gem_balance,
            "level": self.level,
            "experience": self.experience,
            "free_spins_remaining": self.free_spins_remaining,
            "last_check_in_date": self.last_check_in_date.isoformat() if self.last_check_in_date else None,
            "check_in_streak": self.check_in_streak,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProgress":
        """
        Missing keys fall back to the defaults of a brand new player.
        """
        default = cls()
        raw_day = data.get("last_check_in_date")
        if isinstance(raw_day, str) and raw_day:
            last_day: date | None = date.fromisoformat(raw_day)
        elif isinstance(raw_day, date):
            last_day = raw_day
        else:
            last_day = None

        return cls(
            coin_balance=int(data.get("coin_balance", default.coin_balance)),
            gem_balance=int(data.get("gem_balance", default.gem_balance)),
            level=int(data.get("level", default.level)),
            experience=int(data.get("experience", default.experience)),
            free_spins_remaining=int(data.get("free_spins_remaining", default.free_spins_remaining)),
            last_check_in_date=last_day,
            check_in_streak=int(data.get("check_in_streak", default.check_in_streak)),
        )


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    id: str
    amount: int
    direction: LedgerDirection
    description: str
    timestamp: date

    @property
    def signed_amount(self) -> int:
        return self.amount if self.direction == LedgerDirection.CREDIT else -self.amount


@dataclass(frozen=True, slots=True)
class Transition:
    progress: UserProgress
    entry: LedgerEntry | None
    delta: int  # coin balance change, for "+N" style feedback


@dataclass(frozen=True, slots=True)
class TaskCompletion:
    status: TaskCompletionStatus
    task: TaskRecord
    transition: Transition

    @property
    def already(self) -> bool:
        return self.status == TaskCompletionStatus.ALREADY_COMPLETED


def check_in_reward(streak: int) -> int:
    return DAILY_REWARDS[streak % len(DAILY_REWARDS)]


def total_earned(entries: Iterable[LedgerEntry]) -> int:
    """Sum of the credit entries, i.e. coins earned within the ledger window."""
    return sum(e.amount for e in entries if e.direction == LedgerDirection.CREDIT)


def _new_entry_id() -> str:
    return uuid.uuid4().hex


class ProgressLedger:
    """
    Owns one player's UserProgress and the recent-transactions window.

    Each apply_* call is atomic: the new snapshot and its ledger entry are
    computed first and committed together while holding the lock, so
    concurrent callers never see (or produce) a half-applied transition.
    The returned Transition carries the post-mutation snapshot for the
    caller to persist.
    """

    def __init__(
        self,
        progress: UserProgress | None = None,
        entries: Iterable[LedgerEntry] = (),
        *,
        today: Callable[[], date] = date.today,
        new_id: Callable[[], str] = _new_entry_id,
    ) -> None:
        self._progress = progress if progress is not None else UserProgress()
        # newest first; appendleft pushes the oldest off the right end
        self._entries: deque[LedgerEntry] = deque(list(entries)[:LEDGER_WINDOW], maxlen=LEDGER_WINDOW)
        self._today = today
        self._new_id = new_id
        self._lock = threading.Lock()

    @property
    def progress(self) -> UserProgress:
        return self._progress

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        """Most recent first, at most LEDGER_WINDOW items."""
        with self._lock:
            return tuple(self._entries)

    # -------------------------------------------------
    # transitions
    # -------------------------------------------------

    def apply_spin_result(self, prize: PrizeEntry) -> Transition:
        with self._lock:
            cur = self._progress
            if cur.free_spins_remaining <= 0:
                raise NoSpinsLeft()

            coins = prize.value if prize.kind == PrizeKind.COINS else 0
            new = replace(
                cur,
                free_spins_remaining=cur.free_spins_remaining - 1,
                coin_balance=cur.coin_balance + coins,
                experience=cur.experience + SPIN_EXPERIENCE,
            )

            entry = None
            if prize.value > 0:
                entry = self._entry(prize.value, LedgerDirection.CREDIT, f"Lucky Spin: {prize.label}")

            log.debug("spin applied: prize=%s kind=%s coins=%s", prize.id, prize.kind.value, coins)
            return self._commit(new, entry, delta=coins)

    def apply_daily_check_in(self, today: date | None = None) -> Transition:
        """
        Does not check whether the player already checked in `today`;
        callers gate on last_check_in_date first.
        """
        with self._lock:
            cur = self._progress
            day = today or self._today()
            reward = check_in_reward(cur.check_in_streak)

            new = replace(
                cur,
                coin_balance=cur.coin_balance + reward,
                check_in_streak=cur.check_in_streak + 1,
                last_check_in_date=day,
                free_spins_remaining=cur.free_spins_remaining + CHECK_IN_BONUS_SPINS,
            )
            entry = self._entry(reward, LedgerDirection.CREDIT, "Daily Check-in Reward", day=day)

            log.debug("check-in applied: streak=%s reward=%s", new.check_in_streak, reward)
            return self._commit(new, entry, delta=reward)

    def apply_task_completion(self, task: TaskRecord) -> TaskCompletion:
        with self._lock:
            cur = self._progress
            if task.completed:
                return TaskCompletion(
                    status=TaskCompletionStatus.ALREADY_COMPLETED,
                    task=task,
                    transition=Transition(progress=cur, entry=None, delta=0),
                )

            new = replace(
                cur,
                coin_balance=cur.coin_balance + task.reward,
                free_spins_remaining=cur.free_spins_remaining + TASK_BONUS_SPINS,
            )
            entry = self._entry(task.reward, LedgerDirection.CREDIT, f"Task: {task.title}")

            log.debug("task applied: id=%s reward=%s", task.id, task.reward)
            return TaskCompletion(
                status=TaskCompletionStatus.COMPLETED,
                task=replace(task, completed=True),
                transition=self._commit(new, entry, delta=task.reward),
            )

    def apply_withdrawal(self, amount: int, destination: str) -> Transition:
        """
        Raises InsufficientFunds (state untouched) when amount > balance.
        Never clamps or partially debits.
        """
        if amount <= 0:
            raise ContractViolation(f"Withdrawal amount must be positive, got {amount}")

        with self._lock:
            cur = self._progress
            if cur.coin_balance < amount:
                raise InsufficientFunds(balance=cur.coin_balance, amount=amount)

            new = replace(cur, coin_balance=cur.coin_balance - amount)
            entry = self._entry(amount, LedgerDirection.DEBIT, f"Withdrawal to {destination}")

            log.debug("withdrawal applied: amount=%s", amount)
            return self._commit(new, entry, delta=-amount)

    # -------------------------------------------------
    # internals (lock held by caller)
    # -------------------------------------------------

    def _entry(self, amount: int, direction: LedgerDirection, description: str, *, day: date | None = None) -> LedgerEntry:
        return LedgerEntry(
            id=self._new_id(),
            amount=amount,
            direction=direction,
            description=description,
            timestamp=day or self._today(),
        )

    def _commit(self, progress: UserProgress, entry: LedgerEntry | None, *, delta: int) -> Transition:
        self._progress = progress
        if entry is not None:
            self._entries.appendleft(entry)
        return Transition(progress=progress, entry=entry, delta=delta)
