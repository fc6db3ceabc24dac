#!/usr/bin/env python
"""
Report Formatter

Turns per-host statistics into a table with one row per host and writes
it as CSV text.
"""

import ipaddress
import math
from decimal import Decimal
from typing import Dict, TextIO

import pandas as pd

from ..statistics import HostStatistics, HOST_STATISTIC_LABELS


IP_COLUMN = 'ip'
REPORT_COLUMNS = [IP_COLUMN] + HOST_STATISTIC_LABELS


def _host_sort_key(ip: str):
    try:
        return (0, ipaddress.ip_address(ip))
    except ValueError:
        return (1, ip)


def format_float(value: float) -> str:
    """
    Render a float with every significant digit

    Uses the shortest digits that round-trip, laid out like %g: exponent
    form when the decimal exponent is below -4 or at least 6.

    Args:
        value: Number to render

    Returns:
        e.g. "0.2", "100", "1.2348638e+07"
    """
    value = float(value)
    if math.isnan(value):
        return 'nan'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'

    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = ''.join(str(d) for d in digits)
    # Decimal exponent of the leading digit
    point = len(digits) + exponent - 1

    if point < -4 or point >= 6:
        mantissa = text[0] + ('.' + text[1:] if len(text) > 1 else '')
        body = f"{mantissa}e{'-' if point < 0 else '+'}{abs(point):02d}"
    elif exponent >= 0:
        body = text + '0' * exponent
    elif point >= 0:
        body = text[:point + 1] + '.' + text[point + 1:]
    else:
        body = '0.' + '0' * (-point - 1) + text

    return ('-' if sign else '') + body


def build_report_frame(host_statistics: Dict[str, HostStatistics]) -> pd.DataFrame:
    """
    Build the report table

    Args:
        host_statistics: Dictionary mapping host address to HostStatistics

    Returns:
        DataFrame with REPORT_COLUMNS, rows sorted by address, NaN where a
        statistic is undefined
    """
    rows = [
        [ip] + host_statistics[ip].results()
        for ip in sorted(host_statistics, key=_host_sort_key)
    ]
    frame = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    return frame.astype({label: 'float64' for label in HOST_STATISTIC_LABELS})


class TextReportFormatter:
    """CSV report: a header row, then one row per host with full-precision floats"""

    def format(self, frame: pd.DataFrame) -> str:
        return frame.to_csv(index=False, float_format=format_float, na_rep='nan',
                            lineterminator='\n')

    def write(self, frame: pd.DataFrame, stream: TextIO) -> None:
        stream.write(self.format(frame))
