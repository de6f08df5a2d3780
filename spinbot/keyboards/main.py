# spinbot/keyboards/main.py
from aiogram.types import ReplyKeyboardMarkup, KeyboardButton

BTN_SPIN = "🎰 Spin"
BTN_CHECKIN = "✅ Check-in"
BTN_TASKS = "📋 Tasks"
BTN_WALLET = "👛 Wallet"
BTN_STATUS = "📌 Status"
BTN_FORTUNE = "🔮 Fortune"


def main_menu_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=BTN_SPIN), KeyboardButton(text=BTN_CHECKIN)],
            [KeyboardButton(text=BTN_TASKS), KeyboardButton(text=BTN_WALLET)],
            [KeyboardButton(text=BTN_STATUS), KeyboardButton(text=BTN_FORTUNE)],
        ],
        resize_keyboard=True,
        input_field_placeholder="Choose an action…",
        selective=False,
        one_time_keyboard=False,
    )
