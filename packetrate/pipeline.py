#!/usr/bin/env python
"""
Processing Pipeline

Composes decode -> reorder -> aggregate, either as a single-threaded pull
chain or as a producer thread handing reordered records to the caller's
thread through a bounded FIFO queue.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from common.logger import get_logger
from .exceptions import ConfigurationError
from .models import PacketRecord
from .ordering import Reorderer, reorder
from .statistics import HostStatistics, HostStatisticsEngine


logger = get_logger(__name__)

_END = object()


@dataclass
class PipelineResult:
    """Outcome of a complete run"""
    host_statistics: Dict[str, HostStatistics]
    records: int
    records_without_hosts: int
    windows: int
    max_buffered: int


class ThreadedHandoff:
    """Single producer, single consumer handoff of reordered records

    The producer thread blocks when the queue is full; nothing is dropped.
    An exception raised on the producer side is re-raised to the consumer
    once every record produced before it has been delivered.
    """

    def __init__(self, records: Iterable[PacketRecord], queue_size: int = 1024):
        if queue_size < 1:
            raise ConfigurationError(f"queue size must be at least 1, got {queue_size}")

        self._records = records
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._error: Optional[Exception] = None
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._produce, name='packetrate-reorder', daemon=True)

    def _put(self, item) -> bool:
        # Poll so an abandoned consumer does not leave the producer blocked forever
        while not self._stopped.is_set():
            try:
                self._queue.put(item, timeout=0.1)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> None:
        try:
            for record in self._records:
                if not self._put(record):
                    return
        except Exception as e:
            self._error = e
        finally:
            self._put(_END)

    def __iter__(self) -> Iterator[PacketRecord]:
        self._thread.start()
        try:
            while True:
                item = self._queue.get()
                if item is _END:
                    break
                yield item
        finally:
            self._stopped.set()
            self._thread.join()

        if self._error is not None:
            raise self._error


def run_pipeline(records: Iterable[PacketRecord],
                 window: float,
                 epsilon: float,
                 threaded: bool = False,
                 queue_size: int = 1024) -> PipelineResult:
    """
    Reorder a capture's records and compute per-host rate statistics

    Args:
        records: Decoded records in capture order
        window: Window length in seconds
        epsilon: Reordering lateness tolerance in seconds
        threaded: Reorder on a producer thread instead of inline
        queue_size: Bound of the handoff queue in threaded mode

    Returns:
        PipelineResult with the host statistics and run counters

    Raises:
        ConfigurationError: On invalid window, epsilon or queue size
        OrderingError: If the capture is skewed by more than epsilon
    """
    # Validate everything before the first record is read
    engine = HostStatisticsEngine(window)
    reorderer = Reorderer(epsilon)

    ordered = reorder(records, epsilon, reorderer=reorderer)
    if threaded:
        ordered = ThreadedHandoff(ordered, queue_size=queue_size)

    logger.debug("Pipeline: window=%gs epsilon=%gs threaded=%s", window, epsilon, threaded)
    host_statistics = engine.process(ordered)

    return PipelineResult(
        host_statistics=host_statistics,
        records=engine.records_seen,
        records_without_hosts=engine.records_skipped,
        windows=engine.windows_folded,
        max_buffered=reorderer.max_buffered
    )
