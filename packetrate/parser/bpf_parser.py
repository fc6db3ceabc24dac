#!/usr/bin/env python
"""
BPF Parser

Applies a BPF (tcpdump/libpcap) filter expression to a capture file by
letting tcpdump rewrite the matching frames as a pcap stream, which is then
decoded with dpkt like an unfiltered capture.
"""

import os
import subprocess
import tempfile
from typing import Iterator, List

import dpkt

from common.logger import get_logger
from ..exceptions import ConfigurationError, FilterError, ParseError
from ..models import PacketRecord
from .pcap_parser import PcapParser


class BpfParser:
    """tcpdump-based parser for BPF filter expressions"""

    def __init__(self, tcpdump_path: str = 'tcpdump'):
        """
        Initialize BPF parser

        Args:
            tcpdump_path: Path to tcpdump executable
        """
        self.tcpdump_path = tcpdump_path
        self.decoder = PcapParser()
        self.logger = get_logger(__name__)
        self._check_tcpdump()

    def _check_tcpdump(self) -> None:
        """Check if tcpdump is available"""
        try:
            subprocess.run(
                [self.tcpdump_path, '--version'],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True
            )
        except (subprocess.CalledProcessError, FileNotFoundError, PermissionError):
            raise ConfigurationError(
                f"tcpdump not found or not executable: {self.tcpdump_path}. "
                "Please install tcpdump to use BPF filters."
            )

    def validate_filter(self, pcap_path: str, bpf_filter: str) -> None:
        """
        Compile the expression against the capture's link type

        Args:
            pcap_path: Capture file the filter will be applied to
            bpf_filter: BPF expression, e.g. "tcp and dst host 10.0.0.1"

        Raises:
            FilterError: If libpcap cannot compile the expression
        """
        # -d dumps the compiled program instead of reading packets
        cmd = [self.tcpdump_path, '-r', pcap_path, '-d', bpf_filter]
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True
        )
        if result.returncode != 0:
            message = result.stderr.strip() or f"tcpdump exited with status {result.returncode}"
            raise FilterError(f"Invalid BPF filter {bpf_filter!r}: {message}")

    def parse_file(self, pcap_path: str, bpf_filter: str) -> Iterator[PacketRecord]:
        """
        Parse the frames of a capture file that match a BPF expression

        Args:
            pcap_path: Path to pcap or pcapng file
            bpf_filter: BPF expression

        Yields:
            PacketRecord per matching frame, in capture order
        """
        if not os.path.exists(pcap_path):
            raise FileNotFoundError(f"PCAP file not found: {pcap_path}")

        cmd = self._build_tcpdump_command(pcap_path, bpf_filter)
        self.logger.debug("Running: %s", ' '.join(cmd))

        with tempfile.TemporaryFile(mode="w+b") as errors, subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=errors
        ) as proc:
            try:
                reader = dpkt.pcap.Reader(proc.stdout)
            except (ValueError, dpkt.UnpackError):
                # No pcap header at all: tcpdump failed before writing
                reader = None

            if reader is not None:
                yield from self.decoder.iter_records(reader, pcap_path)

            proc.wait()
            if proc.returncode != 0:
                errors.seek(0)
                message = errors.read().decode('utf-8', errors='replace').strip()
                raise ParseError(f"tcpdump failed ({proc.returncode}): {message}")

    def _build_tcpdump_command(self, pcap_path: str, bpf_filter: str) -> List[str]:
        """Read the capture, write matching frames as pcap to stdout"""
        return [self.tcpdump_path, '-r', pcap_path, '-w', '-', bpf_filter]
