# spinbot/keyboards/tasks.py
from __future__ import annotations

from typing import Iterable

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from spinbot.core.catalog import TaskRecord

TASK_CALLBACK_PREFIX = "task:"


def tasks_kb(tasks: Iterable[TaskRecord]) -> InlineKeyboardMarkup | None:
    """
    One button per open task; None when everything is done.
    """
    kb = InlineKeyboardBuilder()
    count = 0
    for t in tasks:
        if t.completed:
            continue
        kb.add(
            InlineKeyboardButton(
                text=f"{t.title} · +{t.reward}",
                callback_data=f"{TASK_CALLBACK_PREFIX}{t.id}",
            )
        )
        count += 1
    if not count:
        return None
    kb.adjust(1)
    return kb.as_markup()
