# spinbot/handlers/user/router.py
from aiogram import Router

from spinbot.handlers.user.spin import router as spin_router
from spinbot.handlers.user.checkin import router as checkin_router
from spinbot.handlers.user.tasks import router as tasks_router
from spinbot.handlers.user.wallet import router as wallet_router
from spinbot.handlers.user.status import router as status_router
from spinbot.handlers.user.fortune import router as fortune_router


router = Router(name="user")

router.include_router(spin_router)
router.include_router(checkin_router)
router.include_router(tasks_router)
router.include_router(wallet_router)
router.include_router(status_router)
router.include_router(fortune_router)
