# spinbot/database/repo/players.py
from __future__ import annotations

from typing import Optional

from aiogram.types import TelegramObject
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spinbot.database.models import Player


def _extract_from_user(event: TelegramObject):
    """
    Best-effort extract aiogram `from_user` from different update types.
    Works for Message, CallbackQuery, InlineQuery, etc.
    """
    u = getattr(event, "from_user", None)
    if u:
        return u

    msg = getattr(event, "message", None)
    if msg and getattr(msg, "from_user", None):
        return msg.from_user

    cb = getattr(event, "callback_query", None)
    if cb and getattr(cb, "from_user", None):
        return cb.from_user

    return None


async def upsert_player(
    session: AsyncSession,
    *,
    telegram_id: int,
    username: str | None,
    first_name: str | None,
    last_name: str | None,
) -> Player:
    res = await session.execute(select(Player).where(Player.telegram_id == telegram_id))
    player = res.scalar_one_or_none()

    if player is None:
        player = Player(
            telegram_id=telegram_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
        )
        session.add(player)
        await session.flush()  # ensures `player.id` exists before handlers use it
        return player

    # keep profile fresh
    player.username = username
    player.first_name = first_name
    player.last_name = last_name
    return player


async def upsert_player_from_event(session: AsyncSession, event: TelegramObject) -> Optional[Player]:
    tg = _extract_from_user(event)
    if tg is None or getattr(tg, "is_bot", False):
        return None

    return await upsert_player(
        session,
        telegram_id=tg.id,
        username=tg.username,
        first_name=tg.first_name,
        last_name=tg.last_name,
    )
