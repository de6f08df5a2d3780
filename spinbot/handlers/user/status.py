# spinbot/handlers/user/status.py
from __future__ import annotations

import html

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from spinbot.core.progress import check_in_reward, total_earned
from spinbot.database.models import Player
from spinbot.keyboards.main import BTN_STATUS
from spinbot.services.wheel import WheelService
from spinbot.utils.reply import reply_safe

router = Router()


@router.message(Command("status"))
@router.message(F.text == BTN_STATUS)
async def status_cmd(message: Message, player: Player, wheel: WheelService) -> None:
    ov = await wheel.overview(player.id)
    p = ov.progress
    open_tasks = sum(1 for t in ov.tasks if not t.completed)

    checkin = "✅ done today" if ov.checked_in_today else f"❌ available (+{check_in_reward(p.check_in_streak)})"

    text = (
        f"📌 <b>{html.escape(player.display_name)}</b>\n"
        f"• Level: <b>{p.level}</b> · XP: <b>{p.experience}</b>\n"
        f"• Coins: <b>{p.coin_balance:,}</b> · Gems: <b>{p.gem_balance:,}</b>\n"
        f"• Total earned: <b>{total_earned(ov.entries):,}</b> (last {len(ov.entries)} transactions)\n"
        f"• Free spins: <b>{p.free_spins_remaining}</b>\n"
        f"• Check-in: {checkin} · streak <b>{p.check_in_streak}</b>\n"
        f"• Open tasks: <b>{open_tasks}</b>"
    )
    await reply_safe(message, text)
