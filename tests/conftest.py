from __future__ import annotations

import pytest


class ScriptedRandom:
    """Stands in for random.Random; hands out a fixed sequence of draws."""

    def __init__(self, draws):
        self._draws = list(draws)
        self.consumed = 0

    def random(self) -> float:
        if self.consumed >= len(self._draws):
            raise AssertionError(f"script exhausted after {self.consumed} draws")
        value = self._draws[self.consumed]
        self.consumed += 1
        return value


@pytest.fixture
def scripted():
    return ScriptedRandom
