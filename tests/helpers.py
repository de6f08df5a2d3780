from __future__ import annotations

from dataclasses import dataclass
from datetime import date


class ScriptedRandom:
    """Returns the given values from random(), in order."""

    def __init__(self, *values: float) -> None:
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


class ConstantRandom:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@dataclass
class FixedClock:
    day: date

    def today(self) -> date:
        return self.day


class Counter:
    def __init__(self) -> None:
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return str(self.n)
