#!/usr/bin/env python
"""
packetrate Data Models

This module defines the data structures passed between the parser,
the reorderer and the statistics engine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


# ==================== Basic Data Structures ====================

@dataclass(frozen=True)
class PacketRecord:
    """A single captured frame reduced to what rate statistics need"""
    timestamp: float
    frame_len: int
    src_ip: Optional[str] = None
    dst_ip: Optional[str] = None

    @property
    def has_hosts(self) -> bool:
        """True when the frame carried IPv4 and both addresses were decoded"""
        return self.src_ip is not None and self.dst_ip is not None


@dataclass
class WindowState:
    """Per-host counters for the current window"""
    packets_sent: int = 0
    packets_received: int = 0
    bytes_sent: int = 0
    bytes_received: int = 0


# ==================== File Information ====================

@dataclass
class FileInfo:
    """Capture file information"""
    file_path: str
    file_size: int
    packet_count: int
    first_packet_time: Optional[datetime] = None
    last_packet_time: Optional[datetime] = None
    duration: float = 0.0
