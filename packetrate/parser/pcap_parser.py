#!/usr/bin/env python
"""
PCAP Parser

Uses dpkt to stream packet records out of pcap and pcapng files.
"""

import os
import socket
import struct
from datetime import datetime, timezone
from typing import BinaryIO, Iterator, Optional

import dpkt

from common.logger import get_logger
from ..exceptions import ParseError
from ..models import PacketRecord, FileInfo


# pcap link types
DLT_EN10MB = 1
DLT_RAW_BSD = 12
DLT_RAW_OPENBSD = 14
DLT_RAW = 101
DLT_LINUX_SLL = 113
DLT_LINUX_SLL2 = 276

RAW_LINK_TYPES = (DLT_RAW_BSD, DLT_RAW_OPENBSD, DLT_RAW)
SUPPORTED_LINK_TYPES = (DLT_EN10MB, DLT_LINUX_SLL, DLT_LINUX_SLL2) + RAW_LINK_TYPES

PCAPNG_MAGIC = b'\x0a\x0d\x0d\x0a'
SLL2_HEADER_LEN = 20
ETH_TYPE_IP = 0x0800


class PcapParser:
    """Capture file parser using dpkt"""

    def __init__(self):
        self.logger = get_logger(__name__)

    def parse_file(self, pcap_path: str) -> Iterator[PacketRecord]:
        """
        Parse a capture file and return a record iterator (streaming mode)

        Every frame yields exactly one record. Frames that are not IPv4, or
        that dpkt cannot decode, yield a record without addresses so that
        they still take part in ordering.

        Args:
            pcap_path: Path to pcap or pcapng file

        Yields:
            PacketRecord per frame, in capture order
        """
        if not os.path.exists(pcap_path):
            raise FileNotFoundError(f"PCAP file not found: {pcap_path}")

        with open(pcap_path, 'rb') as f:
            reader = self._open_reader(f, pcap_path)
            yield from self.iter_records(reader, pcap_path)

    def iter_records(self, reader, source: str) -> Iterator[PacketRecord]:
        """
        Decode every frame of an open dpkt reader

        Args:
            reader: dpkt.pcap.Reader or dpkt.pcapng.Reader
            source: Name used in log and error messages

        Yields:
            PacketRecord per frame, in capture order
        """
        linktype = reader.datalink()
        if linktype not in SUPPORTED_LINK_TYPES:
            raise ParseError(f"Unsupported link type {linktype} in {source}")

        self.logger.debug("Reading %s (link type %d)", source, linktype)

        try:
            for ts, buf in reader:
                yield self._parse_packet(float(ts), buf, linktype)
        except (dpkt.UnpackError, struct.error) as e:
            raise ParseError(f"Truncated or corrupt capture {source}: {e}")

    def get_file_info(self, pcap_path: str) -> FileInfo:
        """
        Get capture file information by reading the file once

        Args:
            pcap_path: Path to capture file

        Returns:
            FileInfo with packet count and first/last timestamps
        """
        if not os.path.exists(pcap_path):
            raise FileNotFoundError(f"PCAP file not found: {pcap_path}")

        packet_count = 0
        first_ts = None
        last_ts = None

        with open(pcap_path, 'rb') as f:
            reader = self._open_reader(f, pcap_path)
            try:
                for ts, _ in reader:
                    packet_count += 1
                    if first_ts is None:
                        first_ts = float(ts)
                    last_ts = float(ts)
            except (dpkt.UnpackError, struct.error) as e:
                raise ParseError(f"Truncated or corrupt capture {pcap_path}: {e}")

        info = FileInfo(
            file_path=pcap_path,
            file_size=os.path.getsize(pcap_path),
            packet_count=packet_count
        )
        if first_ts is not None:
            info.first_packet_time = datetime.fromtimestamp(first_ts, tz=timezone.utc)
            info.last_packet_time = datetime.fromtimestamp(last_ts, tz=timezone.utc)
            info.duration = last_ts - first_ts
        return info

    def _open_reader(self, f: BinaryIO, pcap_path: str):
        """Pick the pcap or pcapng reader from the file magic"""
        magic = f.read(4)
        f.seek(0)
        try:
            if magic == PCAPNG_MAGIC:
                return dpkt.pcapng.Reader(f)
            return dpkt.pcap.Reader(f)
        except (ValueError, dpkt.UnpackError) as e:
            raise ParseError(f"Not a pcap/pcapng file: {pcap_path}: {e}")

    def _parse_packet(self, timestamp: float, buf: bytes, linktype: int) -> PacketRecord:
        """
        Decode a single frame

        Args:
            timestamp: Capture timestamp, epoch seconds
            buf: Raw frame bytes
            linktype: Capture link type

        Returns:
            PacketRecord, with addresses only for IPv4 frames
        """
        frame_len = len(buf)
        try:
            ip = self._network_layer(buf, linktype)
        except (dpkt.UnpackError, struct.error):
            # Malformed frames are kept for ordering only
            ip = None

        if not isinstance(ip, dpkt.ip.IP):
            return PacketRecord(timestamp=timestamp, frame_len=frame_len)

        return PacketRecord(
            timestamp=timestamp,
            frame_len=frame_len,
            src_ip=socket.inet_ntoa(ip.src),
            dst_ip=socket.inet_ntoa(ip.dst)
        )

    def _network_layer(self, buf: bytes, linktype: int):
        if linktype == DLT_LINUX_SLL:
            return dpkt.sll.SLL(buf).data
        if linktype == DLT_LINUX_SLL2:
            return self._parse_sll2(buf)
        if linktype in RAW_LINK_TYPES:
            return self._parse_raw(buf)
        return dpkt.ethernet.Ethernet(buf).data

    def _parse_sll2(self, buf: bytes) -> Optional[dpkt.ip.IP]:
        """
        Parse Linux cooked capture v2 (SLL2)

        The 20-byte header starts with the protocol type in network byte order.
        """
        if len(buf) < SLL2_HEADER_LEN:
            return None

        proto_type = struct.unpack('!H', buf[0:2])[0]
        if proto_type != ETH_TYPE_IP:
            return None
        return dpkt.ip.IP(buf[SLL2_HEADER_LEN:])

    def _parse_raw(self, buf: bytes) -> Optional[dpkt.ip.IP]:
        """Raw IP link type: the version nibble tells IPv4 from IPv6"""
        if not buf or buf[0] >> 4 != 4:
            return None
        return dpkt.ip.IP(buf)
