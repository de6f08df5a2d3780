# spinbot/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _require(env: dict[str, str], key: str) -> str:
    v = env.get(key)
    if v is None or not v.strip():
        raise RuntimeError(f"Missing required environment variable: {key}")
    return v.strip()


def _to_float(value: str, key_name: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid number for {key_name}: {value!r}") from e


@dataclass(frozen=True, slots=True)
class Settings:
    # --- required ---
    bot_token: str

    # --- optional ---
    database_url: str = "sqlite+aiosqlite:///./spinbot.db"

    # --- time (check-in day boundary) ---
    timezone: str = "UTC"

    # --- fortune advice (optional; fallback text when unset) ---
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    advice_timeout: float = 10.0

    # --- environment ---
    environment: str = "production"  # production | development

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local"}

    @classmethod
    def load(cls, *, use_dotenv: bool = True) -> "Settings":
        """
        Loads from process env (and .env if present).
        Fails fast for required fields.
        """
        if use_dotenv:
            load_dotenv()
        env = os.environ

        bot_token = _require(env, "BOT_TOKEN")

        database_url = (env.get("DATABASE_URL") or "sqlite+aiosqlite:///./spinbot.db").strip()
        timezone = (env.get("TIMEZONE") or "UTC").strip() or "UTC"

        openai_api_key = (env.get("OPENAI_API_KEY") or "").strip() or None
        openai_model = (env.get("OPENAI_MODEL") or "gpt-4o-mini").strip() or "gpt-4o-mini"

        timeout_raw = (env.get("ADVICE_TIMEOUT") or "").strip()
        advice_timeout = _to_float(timeout_raw, "ADVICE_TIMEOUT") if timeout_raw else 10.0

        environment = (env.get("ENVIRONMENT") or "production").strip() or "production"

        return cls(
            bot_token=bot_token,
            database_url=database_url,
            timezone=timezone,
            openai_api_key=openai_api_key,
            openai_model=openai_model,
            advice_timeout=advice_timeout,
            environment=environment,
        )
