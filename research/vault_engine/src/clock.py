"""Clocks injected into the ledger"""
import time


def system_clock() -> int:
    return int(time.time())


class ManualClock:
    """Deterministic clock for tests and simulations"""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self.now += seconds
        return self.now
