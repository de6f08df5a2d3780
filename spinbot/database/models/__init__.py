from .player import Player
from .progress import LedgerRecord, PlayerProgress
from .task import PlayerTask

__all__ = [
    "Player",
    "PlayerProgress",
    "LedgerRecord",
    "PlayerTask",
]
