#!/usr/bin/env python
"""
Packet Reorderer

Packets in a capture are not guaranteed to be in chronological order.
Under the assumption that no packet trails the newest timestamp seen so
far by more than epsilon, packets are held in a min-heap until they can
no longer be overtaken and then released in timestamp order.
"""

import heapq
import math
from typing import Iterable, Iterator, List, Optional, Tuple

from common.logger import get_logger
from ..exceptions import ConfigurationError, OrderingError
from ..models import PacketRecord


class Reorderer:
    """Bounded-lateness reordering buffer"""

    def __init__(self, epsilon: float):
        """
        Initialize reorderer

        Args:
            epsilon: Lateness tolerance in seconds, must be >= 0
        """
        if not epsilon >= 0 or math.isinf(epsilon):
            raise ConfigurationError(
                f"epsilon must be a non-negative finite duration, got {epsilon!r}"
            )

        self.epsilon = float(epsilon)
        self.records_in = 0
        self.records_out = 0
        self.max_buffered = 0
        # (timestamp, arrival sequence, record); the sequence keeps ties stable
        self._heap: List[Tuple[float, int, PacketRecord]] = []
        self._previous: Optional[float] = None
        self.logger = get_logger(__name__)

    def __len__(self) -> int:
        return len(self._heap)

    @property
    def load_until(self) -> float:
        """Earliest buffered timestamp + epsilon; arrivals beyond it release packets"""
        if not self._heap:
            return math.inf
        return self._heap[0][0] + self.epsilon

    def push(self, record: PacketRecord) -> List[PacketRecord]:
        """
        Buffer one record

        Args:
            record: Next record from the capture

        Returns:
            Records that became safe to emit, in timestamp order
        """
        heapq.heappush(self._heap, (record.timestamp, self.records_in, record))
        self.records_in += 1
        if len(self._heap) > self.max_buffered:
            self.max_buffered = len(self._heap)

        released = []
        while record.timestamp > self.load_until:
            released.append(self._pop())
        return released

    def flush(self) -> List[PacketRecord]:
        """Release everything still buffered, in timestamp order"""
        released = []
        while self._heap:
            released.append(self._pop())
        self.logger.debug(
            "Reorder buffer drained: %d records in, %d out, peak depth %d",
            self.records_in, self.records_out, self.max_buffered
        )
        return released

    def _pop(self) -> PacketRecord:
        timestamp, _, record = heapq.heappop(self._heap)

        # Verify that output is in chronological order
        if self._previous is not None and timestamp < self._previous:
            raise OrderingError(self._previous, timestamp, self.epsilon)

        self._previous = timestamp
        self.records_out += 1
        return record


def reorder(records: Iterable[PacketRecord], epsilon: float,
            reorderer: Optional[Reorderer] = None) -> Iterator[PacketRecord]:
    """
    Lazily reorder a semi-ordered record stream

    Args:
        records: Records where each timestamp is >= (max timestamp so far - epsilon)
        epsilon: Lateness tolerance in seconds
        reorderer: Optional pre-built Reorderer, to read its counters afterwards

    Yields:
        The same records in non-decreasing timestamp order

    Raises:
        OrderingError: If the input is skewed by more than epsilon
    """
    if reorderer is None:
        reorderer = Reorderer(epsilon)

    for record in records:
        yield from reorderer.push(record)

    # Clear out end of stream
    yield from reorderer.flush()
