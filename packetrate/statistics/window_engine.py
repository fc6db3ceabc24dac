#!/usr/bin/env python
"""
Windowed Host Statistics Engine

Counts packets and bytes per host within fixed-length windows and folds
each finished window's rates into lifetime per-host statistics.
"""

from typing import Dict, Iterable, Optional

from common.logger import get_logger
from ..exceptions import ConfigurationError
from ..models import PacketRecord, WindowState
from .host_statistics import HostStatistics


class HostStatisticsEngine:
    """Two-level rate statistics over a time-ordered packet stream"""

    def __init__(self, window: float):
        """
        Initialize engine

        Args:
            window: Window length in seconds, must be positive
        """
        if not window > 0:
            raise ConfigurationError(f"window duration must be positive, got {window!r}")

        self.window = float(window)
        self.host_statistics: Dict[str, HostStatistics] = {}
        self.windows_folded = 0
        self.records_seen = 0
        self.records_skipped = 0
        self._window_end: Optional[float] = None
        self._states: Dict[str, WindowState] = {}
        self.logger = get_logger(__name__)

    def process(self, records: Iterable[PacketRecord]) -> Dict[str, HostStatistics]:
        """
        Consume an ordered record stream and return the per-host statistics

        Args:
            records: Records in non-decreasing timestamp order

        Returns:
            Dictionary mapping host address to its HostStatistics
        """
        for record in records:
            self.add(record)
        return self.finish()

    def add(self, record: PacketRecord) -> None:
        """Account one record, rolling the window over first if it has ended"""
        self.records_seen += 1
        timestamp = record.timestamp

        if self._window_end is None or timestamp > self._window_end:
            self._fold()
            # Windows restart at the triggering packet, not on a fixed grid
            self._window_end = timestamp + self.window

        if not record.has_hosts:
            self.records_skipped += 1
            return

        size = record.frame_len

        state = self._state(record.src_ip)
        state.packets_sent += 1
        state.bytes_sent += size

        state = self._state(record.dst_ip)
        state.packets_received += 1
        state.bytes_received += size

    def finish(self) -> Dict[str, HostStatistics]:
        """Fold the last, possibly partial, window and return the statistics"""
        self._fold()
        self.logger.debug(
            "Folded %d windows for %d hosts (%d records, %d without IPv4 hosts)",
            self.windows_folded, len(self.host_statistics),
            self.records_seen, self.records_skipped
        )
        return self.host_statistics

    def _state(self, ip: str) -> WindowState:
        state = self._states.get(ip)
        if state is None:
            state = self._states[ip] = WindowState()
        return state

    def _fold(self) -> None:
        if not self._states:
            return

        for ip, state in self._states.items():
            stats = self.host_statistics.get(ip)
            if stats is None:
                stats = self.host_statistics[ip] = HostStatistics()
            stats.fold(state, self.window)

        self.windows_folded += 1
        self.logger.debug(
            "Window ending %.6f folded: %d hosts", self._window_end, len(self._states)
        )
        self._states = {}
