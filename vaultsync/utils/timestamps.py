"""Epoch-millisecond helpers shared by the wire format and the stores."""

import time


def now_ms() -> int:
    return int(time.time() * 1000)
