"""packetrate Statistics Module"""

from .streaming import StreamingStatistic, Min, Max, Mean, Stdev, Sum
from .host_statistics import HostStatistics, RateStatistics, HOST_STATISTIC_LABELS
from .window_engine import HostStatisticsEngine

__all__ = [
    'StreamingStatistic',
    'Min',
    'Max',
    'Mean',
    'Stdev',
    'Sum',
    'HostStatistics',
    'RateStatistics',
    'HOST_STATISTIC_LABELS',
    'HostStatisticsEngine'
]
