from __future__ import annotations

import enum
from dataclasses import dataclass

from .constants import (
    DEFAULT_ACK_SUCCESS_PROB,
    DEFAULT_DATA_SUCCESS_PROB,
    DEFAULT_MAX_ROUNDS,
    DEFAULT_PACING_MS,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_TOTAL_PACKETS,
    DEFAULT_WINDOW_SIZE,
)


class ConfigError(ValueError):
    pass


class RoundPolicy(str, enum.Enum):
    """How the sender consumes acknowledgments within one window round."""

    # stop at the first delivered ack and restart from the new base
    EARLY_EXIT = "early-exit"
    # transmit the whole window, then apply the highest delivered ack
    FULL_WINDOW = "full-window"


def check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True, slots=True)
class SimConfig:
    total_packets: int = DEFAULT_TOTAL_PACKETS
    window_size: int = DEFAULT_WINDOW_SIZE
    data_success_prob: float = DEFAULT_DATA_SUCCESS_PROB
    ack_success_prob: float = DEFAULT_ACK_SUCCESS_PROB
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    pacing_ms: int = DEFAULT_PACING_MS
    seed: int | None = None
    max_rounds: int = DEFAULT_MAX_ROUNDS
    round_policy: RoundPolicy = RoundPolicy.EARLY_EXIT
    ack_final_packet: bool = False

    def __post_init__(self) -> None:
        if self.total_packets < 1:
            raise ConfigError(f"total_packets must be >= 1, got {self.total_packets}")
        if self.window_size < 1:
            raise ConfigError(f"window_size must be >= 1, got {self.window_size}")
        check_probability("data_success_prob", self.data_success_prob)
        check_probability("ack_success_prob", self.ack_success_prob)
        if self.timeout_ms < 0 or self.pacing_ms < 0:
            raise ConfigError("timeout_ms and pacing_ms must be non-negative")
        if self.max_rounds < 1:
            raise ConfigError(f"max_rounds must be >= 1, got {self.max_rounds}")
        # accept the plain string form, e.g. from the command line
        try:
            policy = RoundPolicy(self.round_policy)
        except ValueError as e:
            raise ConfigError(f"unknown round policy: {self.round_policy!r}") from e
        object.__setattr__(self, "round_policy", policy)
