from __future__ import annotations

import enum
from dataclasses import dataclass

from .constants import ACK, DATA


class SegmentKind(enum.IntEnum):
    DATA = DATA
    ACK = ACK


@dataclass(frozen=True, slots=True)
class Segment:
    kind: SegmentKind
    seq: int = 0
    ack: int = 0

    @property
    def is_ack(self) -> bool:
        return self.kind == SegmentKind.ACK

    @staticmethod
    def make_ack(ack_num: int) -> "Segment":
        return Segment(kind=SegmentKind.ACK, ack=ack_num)

    @staticmethod
    def data(seq: int) -> "Segment":
        if seq < 0:
            raise ValueError(f"sequence numbers are non-negative, got {seq}")
        return Segment(kind=SegmentKind.DATA, seq=seq)
