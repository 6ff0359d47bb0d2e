from __future__ import annotations

DATA = 0
ACK = 1

DEFAULT_TOTAL_PACKETS = 10
DEFAULT_WINDOW_SIZE = 3  # (2^m) - 1, m=2
DEFAULT_DATA_SUCCESS_PROB = 0.8
DEFAULT_ACK_SUCCESS_PROB = 0.5
DEFAULT_TIMEOUT_MS = 2000
DEFAULT_PACING_MS = 500
DEFAULT_MAX_ROUNDS = 1000
