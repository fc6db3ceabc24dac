#!/usr/bin/env python
"""
Streaming Statistics

Constant-space accumulators for min, max, mean, standard deviation and
sum. None of them keeps the samples it has seen.
"""

import math
from abc import ABC, abstractmethod


class StreamingStatistic(ABC):
    """Accumulator over a stream of float samples"""

    def __init__(self):
        self.count = 0

    @abstractmethod
    def update(self, sample: float) -> None:
        """Add one sample"""

    @abstractmethod
    def result(self) -> float:
        """Current value, or NaN if no sample has been added"""


class Min(StreamingStatistic):
    """Smallest sample in the stream"""

    def __init__(self):
        super().__init__()
        self.min = math.inf

    def update(self, sample: float) -> None:
        self.count += 1
        if sample < self.min:
            self.min = sample

    def result(self) -> float:
        return self.min if self.count else math.nan


class Max(StreamingStatistic):
    """Largest sample in the stream"""

    def __init__(self):
        super().__init__()
        self.max = -math.inf

    def update(self, sample: float) -> None:
        self.count += 1
        if sample > self.max:
            self.max = sample

    def result(self) -> float:
        return self.max if self.count else math.nan


class Sum(StreamingStatistic):
    """Running total of the stream"""

    def __init__(self):
        super().__init__()
        self.sum = 0.0

    def update(self, sample: float) -> None:
        self.count += 1
        self.sum += sample

    def result(self) -> float:
        return self.sum if self.count else math.nan


class Mean(StreamingStatistic):
    """Arithmetic mean of the stream"""

    def __init__(self):
        super().__init__()
        self.sum = 0.0

    def update(self, sample: float) -> None:
        self.count += 1
        self.sum += sample

    def result(self) -> float:
        if not self.count:
            return math.nan
        return self.sum / self.count


class Stdev(StreamingStatistic):
    """Population standard deviation of the stream"""

    def __init__(self):
        super().__init__()
        self.sum = 0.0
        self.sum2 = 0.0

    def update(self, sample: float) -> None:
        self.count += 1
        self.sum += sample
        self.sum2 += sample * sample

    def result(self) -> float:
        if not self.count:
            return math.nan
        mean = self.sum / self.count
        # Cancellation can leave a tiny negative variance
        variance = max(0.0, self.sum2 / self.count - mean * mean)
        return math.sqrt(variance)
