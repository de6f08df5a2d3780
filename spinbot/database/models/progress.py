# spinbot/database/models/progress.py
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from spinbot.core.progress import LedgerDirection
from spinbot.database.base import Base


class PlayerProgress(Base):
    """
    One row per player: the persisted UserProgress snapshot.
    Overwritten after every transition.
    """
    __tablename__ = "player_progress"
    __table_args__ = (
        CheckConstraint("coin_balance >= 0", name="ck_player_progress_coins_nonneg"),
        CheckConstraint("free_spins_remaining >= 0", name="ck_player_progress_spins_nonneg"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        unique=True,
        index=True,
    )

    coin_balance: Mapped[int] = mapped_column(Integer, default=250)
    gem_balance: Mapped[int] = mapped_column(Integer, default=0)
    level: Mapped[int] = mapped_column(Integer, default=1)
    experience: Mapped[int] = mapped_column(Integer, default=20)
    free_spins_remaining: Mapped[int] = mapped_column(Integer, default=5)
    last_check_in_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    check_in_streak: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
    )


class LedgerRecord(Base):
    """
    Recent transactions of a player. Rows are immutable; older rows are
    deleted once a player has more than the window size.
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index("ix_ledger_entries_player_seq", "player_id", "id"),
        CheckConstraint("amount > 0", name="ck_ledger_entries_amount_pos"),
    )

    # autoincrement id doubles as insertion order
    id: Mapped[int] = mapped_column(primary_key=True)

    entry_id: Mapped[str] = mapped_column(String(32), unique=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), index=True)

    amount: Mapped[int] = mapped_column(Integer)
    direction: Mapped[LedgerDirection] = mapped_column(Enum(LedgerDirection, native_enum=False))
    description: Mapped[str] = mapped_column(String(255))
    day: Mapped[date] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
