from .advice import AdviceService
from .tasks import TaskRegistry
from .wheel import (
    CheckinResult,
    PlayerOverview,
    SpinResult,
    TaskResult,
    WheelService,
    WithdrawResult,
)

__all__ = [
    "AdviceService",
    "TaskRegistry",
    "WheelService",
    "SpinResult",
    "CheckinResult",
    "TaskResult",
    "WithdrawResult",
    "PlayerOverview",
]
