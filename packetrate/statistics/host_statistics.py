#!/usr/bin/env python
"""
Host Statistics

Lifetime statistics for one host, fed one window at a time.
"""

from typing import List

from ..models import WindowState
from .streaming import Min, Max, Mean, Stdev, Sum


# Report column order, after the leading ip column
HOST_STATISTIC_LABELS = [
    "min pps sent",
    "max pps sent",
    "avg pps sent",
    "stdev pps sent",
    "total packets sent",
    "min Bps sent",
    "max Bps sent",
    "avg Bps sent",
    "stdev Bps sent",
    "total byte sent",
    "min pps received",
    "max pps received",
    "avg pps received",
    "stdev pps received",
    "total packets received",
    "min Bps received",
    "max Bps received",
    "avg Bps received",
    "stdev Bps received",
    "total byte received",
]


class RateStatistics:
    """min/max/mean/stdev over per-window rates plus the total count"""

    def __init__(self):
        self.min = Min()
        self.max = Max()
        self.mean = Mean()
        self.stdev = Stdev()
        self.total = Sum()

    @property
    def windows(self) -> int:
        """Number of windows folded into these statistics"""
        return self.total.count

    def update_window(self, count: int, window_seconds: float) -> None:
        """
        Fold one window's count

        Args:
            count: Packets or bytes seen in the window
            window_seconds: Window length used to turn count into a rate
        """
        rate = count / window_seconds
        self.min.update(rate)
        self.max.update(rate)
        self.mean.update(rate)
        self.stdev.update(rate)
        self.total.update(float(count))

    def results(self) -> List[float]:
        return [
            self.min.result(),
            self.max.result(),
            self.mean.result(),
            self.stdev.result(),
            self.total.result(),
        ]


class HostStatistics:
    """The 20 lifetime accumulators of a single host"""

    def __init__(self):
        self.packets_sent = RateStatistics()
        self.bytes_sent = RateStatistics()
        self.packets_received = RateStatistics()
        self.bytes_received = RateStatistics()

    def fold(self, state: WindowState, window_seconds: float) -> None:
        """
        Fold a finished window into the lifetime statistics

        A direction starts accumulating with the first window in which the
        host had traffic in that direction. From then on every window that
        references the host contributes, idle directions as zero rates.

        Args:
            state: Counters of the finished window
            window_seconds: Window length in seconds
        """
        if state.packets_sent or self.packets_sent.windows:
            self.packets_sent.update_window(state.packets_sent, window_seconds)
            self.bytes_sent.update_window(state.bytes_sent, window_seconds)

        if state.packets_received or self.packets_received.windows:
            self.packets_received.update_window(state.packets_received, window_seconds)
            self.bytes_received.update_window(state.bytes_received, window_seconds)

    def results(self) -> List[float]:
        """Values in HOST_STATISTIC_LABELS order, NaN where undefined"""
        return (
            self.packets_sent.results()
            + self.bytes_sent.results()
            + self.packets_received.results()
            + self.bytes_received.results()
        )
