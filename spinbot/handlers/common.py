# spinbot/handlers/common.py
from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from spinbot.utils.reply import reply_safe

router = Router(name="common")

HELP_TEXT = (
    "📌 Available commands:\n"
    "/spin — spin the wheel (uses 1 free spin)\n"
    "/checkin — daily reward (+2 spins)\n"
    "/tasks — earn coins and spins\n"
    "/wallet — balance and recent transactions\n"
    "/withdraw &lt;coins&gt; &lt;paytm number&gt; — redeem coins\n"
    "/status — your progress\n"
    "/fortune — ask the Luck Master\n\n"
    "You can also use the menu buttons."
)


@router.message(CommandStart())
async def cmd_start(message: Message) -> None:
    await reply_safe(
        message,
        "👋 <b>Welcome to the Wheel of Gold!</b>\n\n"
        "You start with <b>250</b> coins and <b>5</b> free spins.\n"
        "Use the menu buttons below 👇",
    )


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await reply_safe(message, HELP_TEXT)
