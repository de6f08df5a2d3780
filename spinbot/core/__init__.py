from .catalog import (
    DAILY_REWARDS,
    DEFAULT_TASKS,
    PRIZES,
    WITHDRAWAL_OPTIONS,
    PrizeEntry,
    PrizeKind,
    TaskKind,
    TaskRecord,
    WithdrawalOption,
)
from .errors import ContractViolation, InsufficientFunds, NoSpinsLeft, SpinbotError
from .progress import (
    LEDGER_WINDOW,
    LedgerDirection,
    LedgerEntry,
    ProgressLedger,
    TaskCompletion,
    TaskCompletionStatus,
    Transition,
    UserProgress,
    check_in_reward,
    total_earned,
)
from .selector import RandomSource, RewardSelector

__all__ = [
    "DAILY_REWARDS",
    "DEFAULT_TASKS",
    "PRIZES",
    "WITHDRAWAL_OPTIONS",
    "PrizeEntry",
    "PrizeKind",
    "TaskKind",
    "TaskRecord",
    "WithdrawalOption",
    "ContractViolation",
    "InsufficientFunds",
    "NoSpinsLeft",
    "SpinbotError",
    "LEDGER_WINDOW",
    "LedgerDirection",
    "LedgerEntry",
    "ProgressLedger",
    "TaskCompletion",
    "TaskCompletionStatus",
    "Transition",
    "UserProgress",
    "check_in_reward",
    "total_earned",
    "RandomSource",
    "RewardSelector",
]
