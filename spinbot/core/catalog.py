# spinbot/core/catalog.py
from __future__ import annotations

import enum
from dataclasses import dataclass


class PrizeKind(str, enum.Enum):
    COINS = "coins"
    GEMS = "gems"
    EMPTY = "empty"


class TaskKind(str, enum.Enum):
    WATCH_AD = "watch_ad"
    FOLLOW = "follow"
    INVITE = "invite"
    INSTALL = "install"


@dataclass(frozen=True, slots=True)
class PrizeEntry:
    id: int
    label: str
    value: int
    kind: PrizeKind
    weight: float


@dataclass(frozen=True, slots=True)
class TaskRecord:
    id: str
    title: str
    reward: int
    kind: TaskKind
    completed: bool = False


@dataclass(frozen=True, slots=True)
class WithdrawalOption:
    coins: int
    cash: str


# Wheel segments, in wheel order (ids match segment positions).
# Weights are relative; only their ratio matters.
PRIZES: tuple[PrizeEntry, ...] = (
    PrizeEntry(id=0, label="50", value=50, kind=PrizeKind.COINS, weight=30),
    PrizeEntry(id=1, label="10", value=10, kind=PrizeKind.GEMS, weight=15),
    PrizeEntry(id=2, label="100", value=100, kind=PrizeKind.COINS, weight=20),
    PrizeEntry(id=3, label="Try Again", value=0, kind=PrizeKind.EMPTY, weight=20),
    PrizeEntry(id=4, label="250", value=250, kind=PrizeKind.COINS, weight=8),
    PrizeEntry(id=5, label="5", value=5, kind=PrizeKind.GEMS, weight=5),
    PrizeEntry(id=6, label="500", value=500, kind=PrizeKind.COINS, weight=1.5),
    PrizeEntry(id=7, label="JACKPOT", value=2000, kind=PrizeKind.COINS, weight=0.5),
)

# Day 1..7 of the check-in cycle
DAILY_REWARDS: tuple[int, ...] = (10, 20, 50, 100, 150, 250, 1000)

DEFAULT_TASKS: tuple[TaskRecord, ...] = (
    TaskRecord(id="1", title="Watch Video Ad", reward=50, kind=TaskKind.WATCH_AD),
    TaskRecord(id="2", title="Follow on Instagram", reward=100, kind=TaskKind.FOLLOW),
    TaskRecord(id="3", title="Invite 1 Friend", reward=500, kind=TaskKind.INVITE),
    TaskRecord(id="4", title="Rate 5 Stars", reward=150, kind=TaskKind.INSTALL),
    TaskRecord(id="5", title="Join Telegram", reward=100, kind=TaskKind.FOLLOW),
)

WITHDRAWAL_OPTIONS: tuple[WithdrawalOption, ...] = (
    WithdrawalOption(coins=10_000, cash="₹10"),
    WithdrawalOption(coins=50_000, cash="₹50"),
    WithdrawalOption(coins=100_000, cash="₹100"),
    WithdrawalOption(coins=250_000, cash="₹250"),
)


def withdrawal_option(coins: int) -> WithdrawalOption | None:
    for opt in WITHDRAWAL_OPTIONS:
        if opt.coins == coins:
            return opt
    return None
