# spinbot/services/tasks.py
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from spinbot.core.catalog import DEFAULT_TASKS, TaskRecord


class TaskRegistry:
    """
    Per-player task lists: the shared task catalog plus each player's
    completion flags. Flags are loaded from the database once per player
    and then kept in memory; the WheelService persists new completions.
    """

    def __init__(self, catalog: Sequence[TaskRecord] = DEFAULT_TASKS) -> None:
        self._catalog = tuple(catalog)
        self._completed: dict[int, set[str]] = {}

    def load(self, player_id: int, completed_ids: Iterable[str]) -> None:
        self._completed[player_id] = set(completed_ids)

    def tasks_for(self, player_id: int) -> list[TaskRecord]:
        done = self._completed.get(player_id, set())
        return [replace(t, completed=t.id in done) for t in self._catalog]

    def get(self, player_id: int, task_id: str) -> TaskRecord | None:
        for t in self.tasks_for(player_id):
            if t.id == task_id:
                return t
        return None

    def mark_completed(self, player_id: int, task_id: str) -> None:
        self._completed.setdefault(player_id, set()).add(task_id)

    def forget(self, player_id: int) -> None:
        self._completed.pop(player_id, None)
