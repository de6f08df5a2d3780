# spinbot/services/advice.py
from __future__ import annotations

import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from spinbot.config.settings import Settings

log = logging.getLogger(__name__)

FALLBACK_FORTUNE = "Your fortune is written in the gold you seek!"
EMPTY_FORTUNE = "The stars are aligned for a great spin today!"


def build_prompt(*, balance: int, streak: int) -> str:
    return (
        'You are a mystical "Luck Master" for a reward wheel game. '
        f"The user has a current balance of {balance} coins and a daily check-in streak of {streak} days. "
        "Give them a short, punchy (max 20 words) mystical fortune advice before they spin the wheel. "
        "Be encouraging and a bit mysterious."
    )


class AdviceService:
    """
    Flavor text shown after a spin. Optional: without an API key (or when
    the API fails) the fixed fallback line is returned. Never raises.
    """

    def __init__(self, client: Any | None = None, *, model: str = "gpt-4o-mini") -> None:
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdviceService":
        if not settings.openai_api_key:
            log.info("OPENAI_API_KEY not set, fortune advice uses fallback text")
            return cls(None, model=settings.openai_model)

        client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.advice_timeout)
        return cls(client, model=settings.openai_model)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def fortune(self, *, balance: int, streak: int) -> str:
        if self._client is None:
            return FALLBACK_FORTUNE

        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_prompt(balance=balance, streak=streak)}],
                max_tokens=60,
                temperature=0.9,
            )
        except OpenAIError:
            log.warning("Fortune advice request failed, using fallback", exc_info=True)
            return FALLBACK_FORTUNE

        text = ""
        if resp.choices:
            text = (resp.choices[0].message.content or "").strip()
        return text or EMPTY_FORTUNE

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
