from __future__ import annotations

from dataclasses import dataclass

from .packet import Segment


@dataclass(frozen=True, slots=True)
class ReceiverAction:
    accepted: bool
    ack: Segment | None = None
    # terminal packet consumed; no new expectation to announce
    final: bool = False


@dataclass(slots=True)
class Receiver:
    """Go-Back-N receiver: accepts only ``expected``, never buffers.

    Every discard re-announces the current expectation. Without that a sender
    whose acks for already-accepted packets were all lost would retransmit
    a window the receiver has moved past, forever.
    """

    total_packets: int
    ack_final_packet: bool = False
    expected: int = 0

    def on_segment_arrival(self, seq: int) -> ReceiverAction:
        if seq != self.expected:
            return ReceiverAction(accepted=False, ack=Segment.make_ack(self.expected))

        if self.expected + 1 < self.total_packets:
            self.expected += 1
            return ReceiverAction(accepted=True, ack=Segment.make_ack(self.expected))

        if self.ack_final_packet:
            self.expected = self.total_packets
            return ReceiverAction(accepted=True, ack=Segment.make_ack(self.expected), final=True)

        return ReceiverAction(accepted=True, final=True)
