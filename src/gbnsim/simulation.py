from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import Callable

from .channel import Channel
from .config import RoundPolicy, SimConfig
from .packet import Segment
from .receiver import Receiver
from .sender import GoBackNSender, Metrics


class RoundOutcome(str, enum.Enum):
    ADVANCED = "advanced"
    # an ack arrived but only repeated the current base
    DUPLICATE_ACK = "duplicate_ack"
    TIMEOUT = "timeout"


class EventKind(str, enum.Enum):
    WINDOW = "window"
    SEND = "send"
    DATA_LOST = "data_lost"
    ACCEPT = "accept"
    DISCARD = "discard"
    ACK_SENT = "ack_sent"
    ACK_LOST = "ack_lost"
    ACK_RECEIVED = "ack_received"
    FINAL_CONFIRMED = "final_confirmed"
    FINAL_LOST = "final_lost"
    TIMEOUT = "timeout"


_MESSAGES = {
    EventKind.WINDOW: "--- Sender's Window: Packets %(seq)d to %(value)d ---",
    EventKind.SEND: "[Sender] Sending packet %(seq)d",
    EventKind.DATA_LOST: "[Sender] Packet %(seq)d lost during transmission",
    EventKind.ACCEPT: "[Receiver] Received expected packet %(seq)d",
    EventKind.DISCARD: "[Receiver] Received out-of-order packet %(seq)d (expected %(value)d) - discarded",
    EventKind.ACK_SENT: "[Receiver] Sending ACK for packet %(value)d",
    EventKind.ACK_LOST: "[Receiver] ACK for packet %(value)d lost",
    EventKind.ACK_RECEIVED: "[Sender] Received ACK for packet %(value)d",
    EventKind.FINAL_CONFIRMED: "[Sender] Delivery of final packet %(seq)d confirmed",
    EventKind.FINAL_LOST: "[Receiver] Confirmation of final packet %(seq)d lost",
    EventKind.TIMEOUT: "[Sender] Timeout for packet %(seq)d. Retransmitting window.",
}


@dataclass(frozen=True, slots=True)
class Event:
    round: int
    kind: EventKind
    seq: int | None = None
    value: int | None = None


@dataclass(frozen=True, slots=True)
class RoundReport:
    number: int
    window: tuple[int, ...]
    base_before: int
    base_after: int
    outcome: RoundOutcome


@dataclass(slots=True)
class SimulationResult:
    converged: bool
    rounds: int
    base_history: list[int]
    reports: list[RoundReport]
    trace: list[Event]
    metrics: Metrics
    elapsed_ms: int

    @property
    def timeouts(self) -> int:
        return self.metrics.timeouts

    def summary(self) -> dict:
        return {
            "converged": self.converged,
            "rounds": self.rounds,
            "timeouts": self.metrics.timeouts,
            "retransmits": self.metrics.retransmits,
            "segments_sent": self.metrics.segments_sent,
            "data_lost": self.metrics.data_lost,
            "acks_sent": self.metrics.acks_sent,
            "acks_lost": self.metrics.acks_lost,
            "efficiency": round(self.metrics.efficiency, 4),
            "elapsed_ms": self.elapsed_ms,
            "final_base": self.base_history[-1],
        }


@dataclass(slots=True)
class Simulation:
    """Drives window rounds between one sender and one receiver.

    Both channel directions share ``rng``: the data draw for a segment is always
    taken before the ack draw it may cause, so a seeded run replays exactly.
    ``sleep`` receives seconds and is only called for pacing; the protocol
    itself runs on virtual time accumulated in ``elapsed_ms``.
    """

    config: SimConfig
    rng: random.Random | None = None
    sleep: Callable[[float], None] | None = None
    sender: GoBackNSender = field(init=False)
    receiver: Receiver = field(init=False)
    data_channel: Channel = field(init=False)
    ack_channel: Channel = field(init=False)
    elapsed_ms: int = field(default=0, init=False)
    reports: list[RoundReport] = field(default_factory=list, init=False)
    trace: list[Event] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        cfg = self.config
        if self.rng is None:
            self.rng = random.Random(cfg.seed)
        self.sender = GoBackNSender(cfg.total_packets, cfg.window_size)
        self.receiver = Receiver(cfg.total_packets, ack_final_packet=cfg.ack_final_packet)
        self.data_channel = Channel(cfg.data_success_prob, self.rng, name="data")
        self.ack_channel = Channel(cfg.ack_success_prob, self.rng, name="ack")

    @property
    def round_number(self) -> int:
        return len(self.reports)

    def _emit(self, kind: EventKind, seq: int | None = None, value: int | None = None) -> None:
        self.trace.append(Event(self.round_number + 1, kind, seq, value))
        logging.info(_MESSAGES[kind], {"seq": seq, "value": value})

    def _wait(self, ms: int) -> None:
        self.elapsed_ms += ms
        if self.sleep is not None and ms > 0:
            self.sleep(ms / 1000.0)

    def run_round(self) -> RoundReport:
        sender = self.sender
        if sender.done:
            raise RuntimeError("all packets already acknowledged")
        metrics = sender.metrics
        early_exit = self.config.round_policy is RoundPolicy.EARLY_EXIT
        base_before = sender.base
        window = sender.window()
        metrics.rounds += 1
        self._emit(EventKind.WINDOW, seq=window[0], value=window[-1])

        acks: list[int] = []
        final_confirmed = False
        for seq in window:
            segment = Segment.data(seq)
            sender.record_send(segment.seq)
            self._emit(EventKind.SEND, seq=seq)
            if not self.data_channel.transmit():
                metrics.data_lost += 1
                self._emit(EventKind.DATA_LOST, seq=seq)
                continue

            action = self.receiver.on_segment_arrival(segment.seq)
            if action.accepted:
                metrics.accepted += 1
                self._emit(EventKind.ACCEPT, seq=seq)
            else:
                metrics.discarded += 1
                self._emit(EventKind.DISCARD, seq=seq, value=self.receiver.expected)

            if action.ack is None:
                # terminal packet: nothing new to announce, only end-of-transfer confirmation
                if self.ack_channel.transmit():
                    self._emit(EventKind.FINAL_CONFIRMED, seq=seq)
                    final_confirmed = True
                    break
                self._emit(EventKind.FINAL_LOST, seq=seq)
                continue

            ack = action.ack.ack
            metrics.acks_sent += 1
            self._emit(EventKind.ACK_SENT, seq=seq, value=ack)
            if not self.ack_channel.transmit():
                metrics.acks_lost += 1
                self._emit(EventKind.ACK_LOST, seq=seq, value=ack)
                continue

            metrics.acks_received += 1
            self._emit(EventKind.ACK_RECEIVED, seq=seq, value=ack)
            acks.append(ack)
            if early_exit:
                break

        if final_confirmed:
            sender.on_final_confirmed()
        elif acks:
            sender.on_ack(max(acks))

        if sender.base > base_before:
            outcome = RoundOutcome.ADVANCED
        elif acks:
            outcome = RoundOutcome.DUPLICATE_ACK
        else:
            outcome = RoundOutcome.TIMEOUT
            sender.on_timeout()
            self._emit(EventKind.TIMEOUT, seq=sender.base)

        report = RoundReport(
            number=self.round_number + 1,
            window=tuple(window),
            base_before=base_before,
            base_after=sender.base,
            outcome=outcome,
        )
        self.reports.append(report)

        if outcome is RoundOutcome.TIMEOUT:
            self._wait(self.config.timeout_ms)
        self._wait(self.config.pacing_ms)
        return report

    def run(self) -> SimulationResult:
        cfg = self.config
        logging.info(
            "GBN start; packets=%d window=%d data_p=%.2f ack_p=%.2f policy=%s",
            cfg.total_packets,
            cfg.window_size,
            cfg.data_success_prob,
            cfg.ack_success_prob,
            cfg.round_policy.value,
        )
        history = [self.sender.base]
        while not self.sender.done and self.round_number < cfg.max_rounds:
            history.append(self.run_round().base_after)

        converged = self.sender.done
        if converged:
            logging.info("[Sender] All packets have been successfully sent and acknowledged.")
        else:
            logging.warning(
                "no convergence after %d rounds; base=%d of %d",
                self.round_number,
                self.sender.base,
                cfg.total_packets,
            )

        return SimulationResult(
            converged=converged,
            rounds=self.round_number,
            base_history=history,
            reports=list(self.reports),
            trace=list(self.trace),
            metrics=self.sender.metrics,
            elapsed_ms=self.elapsed_ms,
        )


def simulate(config: SimConfig, sleep: Callable[[float], None] | None = None) -> SimulationResult:
    return Simulation(config, sleep=sleep).run()
