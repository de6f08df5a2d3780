# spinbot/utils/reply.py
from __future__ import annotations

from aiogram.types import CallbackQuery, Message

from spinbot.keyboards.main import main_menu_kb


async def reply_safe(target: Message | CallbackQuery, text: str, **kwargs) -> None:
    """
    Send an HTML reply to a message, or under the message a callback button
    belongs to. The menu keyboard is attached only in private chats and only
    when the caller passes no markup of its own.
    """
    message = target.message if isinstance(target, CallbackQuery) else target
    if not isinstance(message, Message):
        # callback from a message Telegram no longer exposes
        return

    if "reply_markup" not in kwargs:
        kwargs["reply_markup"] = main_menu_kb() if message.chat.type == "private" else None

    kwargs.setdefault("parse_mode", "HTML")
    await message.answer(text, **kwargs)
