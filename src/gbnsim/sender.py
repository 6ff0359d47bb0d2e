from __future__ import annotations

from dataclasses import dataclass, field

from .constants import DEFAULT_WINDOW_SIZE


@dataclass(slots=True)
class Metrics:
    rounds: int = 0
    timeouts: int = 0
    retransmits: int = 0
    segments_sent: int = 0
    data_lost: int = 0
    accepted: int = 0
    discarded: int = 0
    acks_sent: int = 0
    acks_lost: int = 0
    acks_received: int = 0

    @property
    def efficiency(self) -> float:
        """Fraction of sent data segments the receiver kept."""
        if self.segments_sent == 0:
            return 0.0
        return self.accepted / self.segments_sent


@dataclass(slots=True)
class GoBackNSender:
    total_packets: int
    window_size: int = DEFAULT_WINDOW_SIZE
    base: int = 0
    metrics: Metrics = field(default_factory=Metrics)
    # sequence numbers ever transmitted; a resend of one of these is a retransmit
    _high_water: int = field(default=0, init=False, repr=False)

    @property
    def done(self) -> bool:
        return self.base >= self.total_packets

    def window(self) -> list[int]:
        end = min(self.base + self.window_size, self.total_packets)
        return list(range(self.base, end))

    def record_send(self, seq: int) -> None:
        self.metrics.segments_sent += 1
        if seq < self._high_water:
            self.metrics.retransmits += 1
        else:
            self._high_water = seq + 1

    def on_ack(self, ack: int) -> bool:
        """Apply a cumulative ack; stale acks below ``base`` are ignored."""
        if ack < self.base:
            return False
        self.base = min(ack, self.total_packets)
        return True

    def on_final_confirmed(self) -> None:
        self.base = self.total_packets

    def on_timeout(self) -> None:
        self.metrics.timeouts += 1
