# spinbot/handlers/user/fortune.py
from __future__ import annotations

import html

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from spinbot.database.models import Player
from spinbot.keyboards.main import BTN_FORTUNE
from spinbot.services.advice import AdviceService
from spinbot.services.wheel import WheelService
from spinbot.utils.reply import reply_safe

router = Router()


@router.message(Command("fortune"))
@router.message(F.text == BTN_FORTUNE)
async def fortune_cmd(message: Message, player: Player, wheel: WheelService, advisor: AdviceService) -> None:
    ov = await wheel.overview(player.id)
    fortune = await advisor.fortune(
        balance=ov.progress.coin_balance,
        streak=ov.progress.check_in_streak,
    )
    await reply_safe(message, f"🔮 <i>{html.escape(fortune)}</i>")
