"""packetrate Formatters Module"""

from .report_formatter import (
    TextReportFormatter, build_report_frame, format_float, REPORT_COLUMNS
)
from .json_formatter import JSONFormatter

__all__ = [
    'TextReportFormatter',
    'JSONFormatter',
    'build_report_frame',
    'format_float',
    'REPORT_COLUMNS'
]
