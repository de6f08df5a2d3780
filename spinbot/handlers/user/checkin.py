# spinbot/handlers/user/checkin.py
from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from spinbot.core.catalog import DAILY_REWARDS
from spinbot.database.models import Player
from spinbot.keyboards.main import BTN_CHECKIN
from spinbot.services.wheel import WheelService
from spinbot.utils.reply import reply_safe

router = Router()


def schedule_text(streak: int) -> str:
    """
    7-day reward strip; days already claimed in the current cycle get a tick.
    """
    claimed = streak % len(DAILY_REWARDS)
    if streak and claimed == 0:
        claimed = len(DAILY_REWARDS)

    parts = []
    for i, reward in enumerate(DAILY_REWARDS, start=1):
        mark = "✅" if i <= claimed else f"{reward:,}"
        parts.append(f"D{i}: {mark}")
    return " · ".join(parts)


@router.message(Command("checkin"))
@router.message(F.text == BTN_CHECKIN)
async def checkin_cmd(message: Message, player: Player, wheel: WheelService) -> None:
    res = await wheel.check_in(player.id)
    await reply_safe(message, f"{res.message}\n\n{schedule_text(res.streak)}")
