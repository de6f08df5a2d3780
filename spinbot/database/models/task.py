# spinbot/database/models/task.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from spinbot.database.base import Base


class PlayerTask(Base):
    """
    Completion marker: a row exists once the player finished the task.
    """
    __tablename__ = "player_tasks"
    __table_args__ = (
        UniqueConstraint("player_id", "task_id", name="uq_player_tasks_player_task"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), index=True)

    # id from the task catalog (kept as a string, no migrations when tasks change)
    task_id: Mapped[str] = mapped_column(String(32))

    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
