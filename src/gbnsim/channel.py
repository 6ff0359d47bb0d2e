from __future__ import annotations

import random
from dataclasses import dataclass, field

from .config import check_probability


def attempt(success_probability: float, rng: random.Random) -> bool:
    """Decide whether one transmission survives transit.

    Consumes exactly one uniform draw in [0, 1) from ``rng``.
    """
    return rng.random() < success_probability


@dataclass(slots=True)
class Channel:
    """One direction of the lossy link (sender->receiver or receiver->sender)."""

    success_prob: float
    rng: random.Random
    name: str = ""
    attempts: int = field(default=0, init=False)
    delivered: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        check_probability(f"{self.name or 'channel'} success_prob", self.success_prob)

    def transmit(self) -> bool:
        self.attempts += 1
        ok = attempt(self.success_prob, self.rng)
        if ok:
            self.delivered += 1
        return ok

    @property
    def lost(self) -> int:
        return self.attempts - self.delivered
