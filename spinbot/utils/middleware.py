# spinbot/utils/middleware.py
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from spinbot.database.repo.players import upsert_player_from_event
from spinbot.database.session import Database


class PlayerMiddleware(BaseMiddleware):
    """
    Upserts the current Telegram user and injects it into handler data as `player`.

    The session is committed and closed before the handler runs: gameplay
    state is persisted by the WheelService in its own short transactions.
    Updates without a (human) sender are passed through untouched.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        async with self.db.session() as session:
            try:
                player = await upsert_player_from_event(session, event)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        if player is not None:
            data["player"] = player

        return await handler(event, data)
