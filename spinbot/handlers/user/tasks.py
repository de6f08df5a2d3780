# spinbot/handlers/user/tasks.py
from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from spinbot.database.models import Player
from spinbot.keyboards.main import BTN_TASKS
from spinbot.keyboards.tasks import TASK_CALLBACK_PREFIX, tasks_kb
from spinbot.services.wheel import WheelService
from spinbot.utils.reply import reply_safe

log = logging.getLogger(__name__)

router = Router()


@router.message(Command("tasks"))
@router.message(F.text == BTN_TASKS)
async def tasks_cmd(message: Message, player: Player, wheel: WheelService) -> None:
    ov = await wheel.overview(player.id)

    lines = ["📋 <b>Tasks</b> (each also gives +1 spin)"]
    for t in ov.tasks:
        mark = "✅" if t.completed else "▫️"
        lines.append(f"{mark} {t.title} — <b>+{t.reward}</b> coins")

    kb = tasks_kb(ov.tasks)
    if kb is None:
        lines.append("\nAll tasks done. Check back later!")
        await reply_safe(message, "\n".join(lines))
        return

    await reply_safe(message, "\n".join(lines), reply_markup=kb)


@router.callback_query(F.data.startswith(TASK_CALLBACK_PREFIX))
async def task_done(cb: CallbackQuery, player: Player, wheel: WheelService) -> None:
    task_id = (cb.data or "")[len(TASK_CALLBACK_PREFIX):].strip()
    res = await wheel.complete_task(player.id, task_id)

    # answer quickly to remove Telegram spinner
    await cb.answer("Already completed" if res.already else None)

    if res.ok and not res.already and cb.message:
        ov = await wheel.overview(player.id)
        try:
            await cb.message.edit_reply_markup(reply_markup=tasks_kb(ov.tasks))
        except TelegramBadRequest:
            log.debug("Task keyboard unchanged for player %s", player.id)

    await reply_safe(cb, res.message)
