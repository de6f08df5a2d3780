# spinbot/core/selector.py
from __future__ import annotations

from random import Random
from typing import Protocol, Sequence

from spinbot.core.catalog import PrizeEntry
from spinbot.core.errors import ContractViolation


class RandomSource(Protocol):
    def random(self) -> float: ...


def validate_catalog(catalog: Sequence[PrizeEntry]) -> None:
    if not catalog:
        raise ContractViolation("Prize catalog is empty")
    for p in catalog:
        if not p.weight > 0:
            raise ContractViolation(f"Prize {p.id} ({p.label!r}) has non-positive weight {p.weight!r}")


class RewardSelector:
    """
    Cumulative-weight draw over a fixed prize catalog.

    Each entry is picked with probability weight / sum(weights). The random
    source is injectable (anything with `random() -> float` in [0, 1)), so tests
    can script exact outcomes.
    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        self._rng: RandomSource = rng if rng is not None else Random()

    def draw(self, catalog: Sequence[PrizeEntry]) -> PrizeEntry:
        validate_catalog(catalog)

        total = sum(p.weight for p in catalog)
        r = self._rng.random() * total

        for p in catalog:
            r -= p.weight
            if r <= 0:
                return p

        # float rounding can leave a tiny positive remainder
        return catalog[-1]
