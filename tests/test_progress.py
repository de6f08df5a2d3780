from __future__ import annotations

import threading
from datetime import date

import pytest

from spinbot.core.catalog import DEFAULT_TASKS, PRIZES, PrizeEntry, PrizeKind
from spinbot.core.errors import ContractViolation, InsufficientFunds, NoSpinsLeft
from spinbot.core.progress import (
    LEDGER_WINDOW,
    LedgerDirection,
    ProgressLedger,
    TaskCompletionStatus,
    UserProgress,
    total_earned,
)
from tests.helpers import Counter

DAY = date(2026, 10, 19)

EMPTY = PRIZES[3]
COINS_100 = PRIZES[2]
GEMS_10 = PRIZES[1]


def _ledger(progress: UserProgress | None = None) -> ProgressLedger:
    return ProgressLedger(progress, today=lambda: DAY, new_id=Counter())


def test_new_player_defaults() -> None:
    p = _ledger().progress
    assert p == UserProgress(
        coin_balance=250,
        gem_balance=0,
        level=1,
        experience=20,
        free_spins_remaining=5,
        last_check_in_date=None,
        check_in_streak=0,
    )


def test_empty_spin_only_uses_spin_and_adds_experience() -> None:
    ledger = _ledger()
    tr = ledger.apply_spin_result(EMPTY)

    assert tr.progress.coin_balance == 250
    assert tr.progress.free_spins_remaining == 4
    assert tr.progress.experience == 30
    assert tr.entry is None
    assert tr.delta == 0
    assert ledger.entries == ()


def test_coin_spin_credits_balance_and_ledger() -> None:
    ledger = _ledger()
    tr = ledger.apply_spin_result(COINS_100)

    assert tr.progress.coin_balance == 350
    assert tr.delta == 100
    assert tr.entry is not None
    assert tr.entry.direction == LedgerDirection.CREDIT
    assert tr.entry.amount == 100
    assert tr.entry.timestamp == DAY
    assert ledger.entries == (tr.entry,)


def test_gem_spin_is_logged_but_leaves_balances() -> None:
    tr = _ledger().apply_spin_result(GEMS_10)

    assert tr.progress.coin_balance == 250
    assert tr.progress.gem_balance == 0
    assert tr.entry is not None and tr.entry.amount == 10
    assert tr.delta == 0


def test_spin_without_allowance_is_refused() -> None:
    ledger = _ledger(UserProgress(free_spins_remaining=0))
    with pytest.raises(NoSpinsLeft):
        ledger.apply_spin_result(COINS_100)
    assert ledger.progress.free_spins_remaining == 0
    assert ledger.progress.coin_balance == 250


def test_check_in_follows_reward_schedule() -> None:
    ledger = _ledger()
    tr = ledger.apply_daily_check_in()

    assert tr.delta == 10
    assert tr.progress.coin_balance == 260
    assert tr.progress.check_in_streak == 1
    assert tr.progress.last_check_in_date == DAY
    assert tr.progress.free_spins_remaining == 7
    assert tr.entry is not None and tr.entry.description == "Daily Check-in Reward"


def test_check_in_cycle_wraps_after_seven_days() -> None:
    ledger = _ledger(UserProgress(check_in_streak=6))

    first = ledger.apply_daily_check_in(date(2026, 10, 20))
    assert first.delta == 1000
    assert first.progress.check_in_streak == 7

    second = ledger.apply_daily_check_in(date(2026, 10, 21))
    assert second.delta == 10
    assert second.progress.check_in_streak == 8
    assert second.progress.last_check_in_date == date(2026, 10, 21)


def test_task_completion_credits_once() -> None:
    ledger = _ledger()
    task = DEFAULT_TASKS[2]  # Invite 1 Friend, 500

    done = ledger.apply_task_completion(task)
    assert done.status == TaskCompletionStatus.COMPLETED
    assert done.task.completed is True
    assert done.transition.progress.coin_balance == 750
    assert done.transition.progress.free_spins_remaining == 6
    assert done.transition.entry is not None
    assert done.transition.entry.description == "Task: Invite 1 Friend"

    again = ledger.apply_task_completion(done.task)
    assert again.already
    assert again.transition.entry is None
    assert ledger.progress.coin_balance == 750
    assert ledger.progress.free_spins_remaining == 6
    assert len(ledger.entries) == 1


def test_withdrawal_over_balance_changes_nothing() -> None:
    ledger = _ledger(UserProgress(coin_balance=9_999))
    before_entries = ledger.entries

    with pytest.raises(InsufficientFunds) as exc:
        ledger.apply_withdrawal(10_000, "Paytm 9876543210")

    assert exc.value.balance == 9_999
    assert exc.value.amount == 10_000
    assert ledger.progress.coin_balance == 9_999
    assert ledger.entries == before_entries


def test_withdrawal_of_whole_balance_reaches_zero() -> None:
    ledger = _ledger(UserProgress(coin_balance=10_000))
    tr = ledger.apply_withdrawal(10_000, "Paytm 9876543210")

    assert tr.progress.coin_balance == 0
    assert tr.delta == -10_000
    assert tr.entry is not None
    assert tr.entry.direction == LedgerDirection.DEBIT
    assert tr.entry.signed_amount == -10_000
    assert "9876543210" in tr.entry.description


@pytest.mark.parametrize("amount", [0, -5])
def test_withdrawal_amount_must_be_positive(amount: int) -> None:
    with pytest.raises(ContractViolation):
        _ledger().apply_withdrawal(amount, "Paytm 9876543210")


def test_ledger_keeps_ten_newest_first() -> None:
    ledger = _ledger(UserProgress(free_spins_remaining=20))
    for _ in range(15):
        ledger.apply_spin_result(COINS_100)

    ids = [e.id for e in ledger.entries]
    assert len(ids) == LEDGER_WINDOW
    assert ids == [str(i) for i in range(15, 5, -1)]


def test_ledger_accepts_longer_history_on_load() -> None:
    source = _ledger(UserProgress(free_spins_remaining=20))
    for _ in range(10):
        source.apply_spin_result(COINS_100)
    newest_first = list(source.entries) * 2

    ledger = ProgressLedger(source.progress, newest_first, today=lambda: DAY)
    assert ledger.entries == source.entries


def test_total_earned_counts_credits_in_window() -> None:
    ledger = _ledger(UserProgress(free_spins_remaining=20))
    ledger.apply_spin_result(COINS_100)
    ledger.apply_daily_check_in(DAY)
    ledger.apply_withdrawal(100, "Paytm 9876543210")
    assert total_earned(ledger.entries) == 110

    for _ in range(12):
        ledger.apply_spin_result(COINS_100)
    assert total_earned(ledger.entries) == 1_000
    assert total_earned(()) == 0


def test_concurrent_withdrawals_never_overdraw() -> None:
    ledger = _ledger(UserProgress(coin_balance=500))
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker() -> None:
        try:
            ledger.apply_withdrawal(100, "Paytm 9876543210")
            ok = True
        except InsufficientFunds:
            ok = False
        with results_lock:
            results.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 5
    assert ledger.progress.coin_balance == 0
    assert len(ledger.entries) == 5


def test_progress_serializes_to_plain_mapping() -> None:
    p = UserProgress(coin_balance=1, last_check_in_date=DAY, check_in_streak=3)
    data = p.to_dict()

    assert data["last_check_in_date"] == "2026-10-19"
    assert UserProgress.from_dict(data) == p
    assert UserProgress.from_dict({}) == UserProgress()


def test_custom_prize_kinds() -> None:
    prize = PrizeEntry(id=9, label="0 coins", value=0, kind=PrizeKind.COINS, weight=1)
    tr = _ledger().apply_spin_result(prize)
    assert tr.entry is None
    assert tr.progress.coin_balance == 250
