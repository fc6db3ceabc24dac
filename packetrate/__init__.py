"""
packetrate - per-host packet rate statistics from capture files

Restores chronological order of a semi-ordered capture and aggregates
windowed packets/sec and bytes/sec statistics per host.
"""

__version__ = '1.0.0'
