# spinbot/handlers/user/wallet.py
from __future__ import annotations

import html

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from spinbot.core.catalog import WITHDRAWAL_OPTIONS
from spinbot.core.progress import LedgerDirection
from spinbot.database.models import Player
from spinbot.keyboards.main import BTN_WALLET
from spinbot.services.wheel import WheelService
from spinbot.utils.reply import reply_safe

router = Router()

WITHDRAW_USAGE = (
    "Usage: <code>/withdraw &lt;coins&gt; &lt;10-digit paytm number&gt;</code>\n"
    "Example: <code>/withdraw 10000 9876543210</code>"
)


@router.message(Command("wallet"))
@router.message(F.text == BTN_WALLET)
async def wallet_cmd(message: Message, player: Player, wheel: WheelService) -> None:
    ov = await wheel.overview(player.id)
    p = ov.progress

    lines = [
        "👛 <b>Wallet</b>",
        f"• Coins: <b>{p.coin_balance:,}</b>",
        f"• Gems: <b>{p.gem_balance:,}</b>",
        "",
        "💸 <b>Redeem via Paytm</b>",
    ]
    for opt in WITHDRAWAL_OPTIONS:
        mark = "🟢" if p.coin_balance >= opt.coins else "⚪️"
        lines.append(f"{mark} {opt.cash} = {opt.coins:,} coins")

    lines.append("")
    lines.append("🧾 <b>Recent transactions</b>")
    if not ov.entries:
        lines.append("No transactions yet.")
    for e in ov.entries:
        sign = "+" if e.direction == LedgerDirection.CREDIT else "−"
        lines.append(f"{e.timestamp.isoformat()} {sign}{e.amount:,} · {html.escape(e.description)}")

    lines.append("")
    lines.append(WITHDRAW_USAGE)
    await reply_safe(message, "\n".join(lines))


@router.message(Command("withdraw"))
async def withdraw_cmd(message: Message, command: CommandObject, player: Player, wheel: WheelService) -> None:
    parts = (command.args or "").split()
    if len(parts) != 2:
        await reply_safe(message, WITHDRAW_USAGE)
        return

    amount_s, number = parts
    try:
        amount = int(amount_s.replace(",", "").replace("_", ""))
    except ValueError:
        await reply_safe(message, WITHDRAW_USAGE)
        return

    res = await wheel.withdraw(player.id, amount=amount, paytm_number=number)
    await reply_safe(message, res.message)
