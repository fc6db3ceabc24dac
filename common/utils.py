#!/usr/bin/env python
"""
Common Utilities

Shared helper functions for the packetrate CLI and library.
"""

import os
import re
import sys
from datetime import datetime, timezone


_DURATION_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}

_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


def parse_duration(value) -> float:
    """
    Parse a duration into seconds

    Accepts plain numbers (seconds) and Go-style duration strings made of
    one or more number/unit pairs, e.g. "5s", "250ms", "1m30s".

    Args:
        value: Number or duration string

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value is not a valid duration
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    sign = 1.0
    if text[0] in '+-':
        sign = -1.0 if text[0] == '-' else 1.0
        text = text[1:]

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")

    return sign * total


def format_duration(seconds: float) -> str:
    """
    Format duration as human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., "1h 23m 45s", "45.2s")
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.1f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs:.0f}s"


def format_timestamp(timestamp: float) -> str:
    """Render an epoch timestamp as UTC ISO-8601 followed by the raw value"""
    try:
        iso = datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return f"{timestamp:.9f}"
    return f"{iso} ({timestamp:.9f})"


def print_error(message: str) -> None:
    """
    Print error message to stderr

    Args:
        message: Error message to display
    """
    print(f"ERROR: {message}", file=sys.stderr)


def validate_file_path(file_path: str) -> bool:
    """
    Check if file exists and is readable

    Args:
        file_path: Path to file

    Returns:
        True if file exists and is readable, False otherwise
    """
    return os.path.isfile(file_path) and os.access(file_path, os.R_OK)


def validate_output_path(file_path: str) -> bool:
    """
    Check that a report can be created at file_path

    "-" (stdout) is always accepted. Existing files are rejected, the
    report never overwrites.

    Args:
        file_path: Path to output file

    Returns:
        True if the file does not exist and its directory is writable
    """
    if file_path == '-':
        return True
    if os.path.exists(file_path):
        return False
    directory = os.path.dirname(os.path.abspath(file_path))
    return os.path.isdir(directory) and os.access(directory, os.W_OK)
