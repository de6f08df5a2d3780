# spinbot/handlers/user/spin.py
from __future__ import annotations

import html

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from spinbot.database.models import Player
from spinbot.keyboards.main import BTN_SPIN
from spinbot.services.advice import AdviceService
from spinbot.services.wheel import WheelService
from spinbot.utils.reply import reply_safe

router = Router()


@router.message(Command("spin"))
@router.message(F.text == BTN_SPIN)
async def spin_cmd(message: Message, player: Player, wheel: WheelService, advisor: AdviceService) -> None:
    res = await wheel.spin(player.id)
    await reply_safe(message, res.message)

    if not res.ok or res.progress is None:
        return

    fortune = await advisor.fortune(
        balance=res.progress.coin_balance,
        streak=res.progress.check_in_streak,
    )
    await reply_safe(message, f"🔮 <i>{html.escape(fortune)}</i>")
