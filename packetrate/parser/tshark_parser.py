#!/usr/bin/env python
"""
Tshark Parser

Uses tshark field extraction to stream packet records when a Wireshark
display filter has to be applied.
"""

import csv
import os
import subprocess
import tempfile
from typing import Iterator, List, Optional

from common.logger import get_logger
from ..exceptions import ConfigurationError, FilterError, ParseError
from ..models import PacketRecord


class TsharkParser:
    """Tshark-based parser supporting display filters"""

    # tshark fields to extract, in output column order
    FIELDS = [
        'frame.time_epoch',
        'frame.cap_len',
        'ip.src',
        'ip.dst',
    ]

    def __init__(self, tshark_path: str = 'tshark'):
        """
        Initialize tshark parser

        Args:
            tshark_path: Path to tshark executable
        """
        self.tshark_path = tshark_path
        self.logger = get_logger(__name__)
        self._check_tshark()

    def _check_tshark(self) -> None:
        """Check if tshark is available"""
        try:
            subprocess.run(
                [self.tshark_path, '-v'],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True
            )
        except (subprocess.CalledProcessError, FileNotFoundError, PermissionError):
            raise ConfigurationError(
                f"tshark not found or not executable: {self.tshark_path}. "
                "Please install Wireshark/tshark."
            )

    def validate_filter(self, pcap_path: str, display_filter: str) -> None:
        """
        Reject an invalid display filter before any packet is processed

        Args:
            pcap_path: Capture file the filter will be applied to
            display_filter: Wireshark display filter

        Raises:
            FilterError: If tshark rejects the expression
        """
        cmd = [
            self.tshark_path, '-r', pcap_path,
            '-Y', display_filter,
            '-c', '1',
            '-T', 'fields', '-e', 'frame.number'
        ]
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True
        )
        if result.returncode != 0:
            message = result.stderr.strip() or f"tshark exited with status {result.returncode}"
            raise FilterError(f"Invalid filter {display_filter!r}: {message}")

    def parse_file(self, pcap_path: str,
                   display_filter: Optional[str] = None) -> Iterator[PacketRecord]:
        """
        Parse a capture file and return a record iterator (streaming mode)

        Args:
            pcap_path: Path to capture file
            display_filter: Optional tshark display filter

        Yields:
            PacketRecord per frame that passes the filter, in capture order
        """
        if not os.path.exists(pcap_path):
            raise FileNotFoundError(f"PCAP file not found: {pcap_path}")

        cmd = self._build_tshark_command(pcap_path, display_filter)
        self.logger.debug("Running: %s", ' '.join(cmd))

        # stderr goes to a file so a chatty tshark cannot block on a full pipe
        with tempfile.TemporaryFile(mode="w+") as errors, subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=errors,
            text=True
        ) as proc:
            for row in csv.reader(proc.stdout):
                record = self._parse_row(row)
                if record is not None:
                    yield record

            proc.wait()
            if proc.returncode != 0:
                errors.seek(0)
                raise ParseError(f"tshark failed ({proc.returncode}): {errors.read().strip()}")

    def _build_tshark_command(self, pcap_path: str,
                              display_filter: Optional[str] = None) -> List[str]:
        """Build tshark command with fields extraction"""
        cmd = [self.tshark_path, '-r', pcap_path, '-T', 'fields']

        for field in self.FIELDS:
            cmd.extend(['-e', field])

        # CSV formatting, outer IP header only
        cmd.extend([
            '-E', 'separator=,',
            '-E', 'quote=d',
            '-E', 'occurrence=f'
        ])

        if display_filter:
            cmd.extend(['-Y', display_filter])

        return cmd

    def _parse_row(self, row: List[str]) -> Optional[PacketRecord]:
        """
        Parse one CSV row into a PacketRecord

        Args:
            row: Values in FIELDS order

        Returns:
            PacketRecord, or None for rows without a usable timestamp
        """
        if len(row) != len(self.FIELDS):
            return None

        time_epoch, frame_len, src_ip, dst_ip = (value.strip() for value in row)
        try:
            timestamp = float(time_epoch)
            length = int(frame_len) if frame_len else 0
        except ValueError:
            self.logger.debug("Skipping unparsable tshark row: %r", row)
            return None

        if not src_ip or not dst_ip:
            return PacketRecord(timestamp=timestamp, frame_len=length)

        return PacketRecord(
            timestamp=timestamp,
            frame_len=length,
            src_ip=src_ip,
            dst_ip=dst_ip
        )
