#!/usr/bin/env python
"""
JSON Formatter

Converts the report table and run metadata to JSON.
"""

import json
import math
from typing import Any, Dict, Optional, TextIO

import pandas as pd

from .report_formatter import IP_COLUMN


class JSONFormatter:
    """JSON format output generator"""

    def __init__(self, indent: Optional[int] = 2):
        self.indent = indent

    def format(self, frame: pd.DataFrame, metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Convert the report table to a JSON string

        Undefined statistics (NaN) become null.

        Args:
            frame: Report table from build_report_frame()
            metadata: Optional run metadata

        Returns:
            JSON document {"metadata": {...}, "hosts": {ip: {label: value}}}
        """
        hosts = {}
        for row in frame.to_dict(orient='records'):
            ip = row.pop(IP_COLUMN)
            hosts[ip] = {label: self._number(value) for label, value in row.items()}

        document = {
            'metadata': metadata or {},
            'hosts': hosts,
        }
        return json.dumps(
            document,
            indent=self.indent,
            ensure_ascii=False,
            allow_nan=False
        )

    def write(self, frame: pd.DataFrame, stream: TextIO,
              metadata: Optional[Dict[str, Any]] = None) -> None:
        stream.write(self.format(frame, metadata))
        stream.write('\n')

    @staticmethod
    def _number(value: Any) -> Optional[float]:
        value = float(value)
        return value if math.isfinite(value) else None
