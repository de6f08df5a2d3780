# spinbot/main.py
import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from spinbot.config import Settings
from spinbot.database import Database
from spinbot.handlers import router as handlers_router
from spinbot.services.advice import AdviceService
from spinbot.services.wheel import WheelService
from spinbot.utils.dt import CheckInClock
from spinbot.utils.middleware import PlayerMiddleware


def setup_logging(is_dev: bool) -> None:
    """
    App logs at INFO (DEBUG in dev); SQLAlchemy and HTTP client logs at WARNING+.
    """
    app_level = logging.DEBUG if is_dev else logging.INFO

    logging.basicConfig(
        level=app_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    for name in (
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "sqlalchemy.orm",
        "aiosqlite",
        "httpx",
        "openai",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)


async def main() -> None:
    settings = Settings.load()
    setup_logging(settings.is_dev)
    log = logging.getLogger("spinbot")

    db = Database(settings.database_url)
    await db.init_models()
    log.info("DB initialized")

    wheel = WheelService(db, clock=CheckInClock(settings.timezone))
    advisor = AdviceService.from_settings(settings)

    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    dp = Dispatcher()

    # Inject workflow data
    dp.workflow_data["settings"] = settings
    dp.workflow_data["db"] = db
    dp.workflow_data["wheel"] = wheel
    dp.workflow_data["advisor"] = advisor

    # Player row per update
    dp.update.middleware(PlayerMiddleware(db))

    dp.include_router(handlers_router)

    try:
        await dp.start_polling(bot)
    except (asyncio.CancelledError, KeyboardInterrupt):
        pass
    except Exception:
        log.exception("Bot crashed")
        raise
    finally:
        try:
            await advisor.close()
        except Exception:
            log.exception("Failed to close advice client")

        try:
            await db.close()
        except Exception:
            log.exception("Failed to close DB")

        try:
            await bot.session.close()
        except Exception:
            log.exception("Failed to close bot session")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
