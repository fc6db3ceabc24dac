#!/usr/bin/env python3
"""
packetrate CLI

Reads a capture file, restores chronological packet order and reports
per-host windowed packet and byte rate statistics.
"""

import argparse
import logging
import sys
import time
from typing import Iterator, Optional

from tqdm import tqdm

from common.config import Config
from common.logger import setup_logger
from common.utils import (
    format_duration, parse_duration, print_error, validate_file_path, validate_output_path
)
from packetrate import __version__
from packetrate.exceptions import ConfigurationError, PacketRateError
from packetrate.formatters import JSONFormatter, TextReportFormatter, build_report_frame
from packetrate.models import PacketRecord
from packetrate.parser import BpfParser, PcapParser, TsharkParser
from packetrate.pipeline import PipelineResult, run_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='packetrate',
        description='Per-host packet rate statistics from a capture file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report to stdout with 5s windows and 5s reordering tolerance
  packetrate --pcap capture.pcap

  # 1 second windows, TCP traffic to one host (BPF), JSON report written to a new file
  packetrate --pcap capture.pcap --window 1s --filter "tcp and dst host 10.0.0.1" \
      --format json -o report.json

  # Wireshark display filter instead of BPF
  packetrate --pcap capture.pcap --display-filter "http.request"

  # Captures merged from several interfaces can be skewed further
  packetrate --pcap merged.pcapng --epsilon 30s --threaded
        """
    )

    # Input options
    parser.add_argument('--pcap', required=True, help='path to PCAP/PCAPNG file')
    parser.add_argument('--filter', help='BPF filter expression to apply (requires tcpdump)')
    parser.add_argument('--display-filter', help='Wireshark display filter to apply (requires tshark)')
    parser.add_argument('--tcpdump-path', help='tcpdump executable (default: tcpdump)')
    parser.add_argument('--tshark-path', help='tshark executable (default: tshark)')

    # Analysis options
    parser.add_argument('--window', type=parse_duration,
                        help='timestep to average over for packets/sec, e.g. 5s, 500ms (default: 5s)')
    parser.add_argument('--epsilon', type=parse_duration,
                        help='tolerance in packet ordering, e.g. 5s (default: 5s)')
    parser.add_argument('--threaded', action='store_true', default=None,
                        help='reorder on a separate thread feeding the aggregator')
    parser.add_argument('--queue-size', type=int,
                        help='handoff queue bound for --threaded (default: 1024)')

    # Output options
    parser.add_argument('-o', '--output', default='-',
                        help='output path, "-" for stdout; existing files are never overwritten')
    parser.add_argument('--format', choices=['text', 'json'], help='report format (default: text)')
    parser.add_argument('--config', help='YAML or JSON configuration file')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='console logging level (default: INFO)')
    parser.add_argument('--log-file', help='also write DEBUG logs to this file')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='no progress bar, warnings and errors only')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    return parser


def load_config(args) -> Config:
    """Merge CLI arguments over the configuration file"""
    try:
        config = Config(args.config)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot load config {args.config}: {e}")

    overrides = {
        'analysis.window': args.window,
        'analysis.epsilon': args.epsilon,
        'pcap.filter': args.filter,
        'pcap.display_filter': args.display_filter,
        'pcap.tcpdump_path': args.tcpdump_path,
        'pcap.tshark_path': args.tshark_path,
        'pipeline.threaded': args.threaded,
        'pipeline.queue_size': args.queue_size,
        'report.format': args.format,
        'logging.level': args.log_level,
        'logging.file': args.log_file,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    if args.quiet and args.log_level is None:
        config.set('logging.level', 'WARNING')

    # Config files may carry duration strings
    for key in ('analysis.window', 'analysis.epsilon'):
        try:
            config.set(key, parse_duration(config.get(key)))
        except ValueError as e:
            raise ConfigurationError(f"{key}: {e}")

    if config.get('report.format') not in ('text', 'json'):
        raise ConfigurationError(f"Unsupported report format: {config.get('report.format')}")

    return config


def open_records(pcap_path: str, config: Config) -> Iterator[PacketRecord]:
    """Pick the capture backend; validates the filter before returning"""
    bpf_filter = config.get('pcap.filter')
    display_filter = config.get('pcap.display_filter')

    if bpf_filter and display_filter:
        raise ConfigurationError("--filter (BPF) and --display-filter cannot be combined")

    if bpf_filter:
        parser = BpfParser(tcpdump_path=config.get('pcap.tcpdump_path'))
        parser.validate_filter(pcap_path, bpf_filter)
        return parser.parse_file(pcap_path, bpf_filter)

    if display_filter:
        parser = TsharkParser(tshark_path=config.get('pcap.tshark_path'))
        parser.validate_filter(pcap_path, display_filter)
        return parser.parse_file(pcap_path, display_filter)

    return PcapParser().parse_file(pcap_path)


def write_report(result: PipelineResult, config: Config, output_path: str,
                 metadata: dict) -> None:
    frame = build_report_frame(result.host_statistics)

    if output_path == '-':
        stream = sys.stdout
    else:
        # Exclusive create, the report never replaces an existing file
        stream = open(output_path, 'x', encoding='utf-8')

    try:
        if config.get('report.format') == 'json':
            JSONFormatter(indent=config.get('report.json.indent')).write(frame, stream, metadata)
        else:
            TextReportFormatter().write(frame, stream)
    finally:
        if stream is not sys.stdout:
            stream.close()


def run(args) -> int:
    config = load_config(args)

    level = getattr(logging, str(config.get('logging.level')).upper(), logging.INFO)
    logger = setup_logger('packetrate', level=level, log_file=config.get('logging.file'))

    # Configuration errors abort before any packet is read
    if not validate_file_path(args.pcap):
        raise ConfigurationError(f"PCAP file not found or not readable: {args.pcap}")
    if not validate_output_path(args.output):
        raise ConfigurationError(f"Output path exists or is not writable: {args.output}")

    window = config.get('analysis.window')
    epsilon = config.get('analysis.epsilon')
    if not window > 0:
        raise ConfigurationError(f"window duration must be positive, got {window:g}s")
    if not epsilon >= 0:
        raise ConfigurationError(f"epsilon must not be negative, got {epsilon:g}s")

    logger.info("Analyzing %s: window=%gs epsilon=%gs filter=%s display-filter=%s",
                args.pcap, window, epsilon, config.get('pcap.filter') or '-',
                config.get('pcap.display_filter') or '-')

    # Costs an extra pass over the capture
    if logger.isEnabledFor(logging.DEBUG) and not config.get('pcap.display_filter'):
        info = PcapParser().get_file_info(args.pcap)
        logger.debug("Capture %s: %d bytes, %d packets spanning %s",
                     info.file_path, info.file_size, info.packet_count,
                     format_duration(info.duration))

    records = open_records(args.pcap, config)
    progress: Optional[tqdm] = None
    if not args.quiet:
        progress = tqdm(records, desc='packets', unit='pkt', file=sys.stderr, leave=False)
        records = iter(progress)

    start = time.perf_counter()
    try:
        result = run_pipeline(
            records,
            window=window,
            epsilon=epsilon,
            threaded=bool(config.get('pipeline.threaded')),
            queue_size=int(config.get('pipeline.queue_size'))
        )
    finally:
        if progress is not None:
            progress.close()
    elapsed = time.perf_counter() - start

    logger.info("Processed %d packets (%d without IPv4 hosts) in %s: %d hosts, %d windows, "
                "peak reorder buffer %d",
                result.records, result.records_without_hosts, format_duration(elapsed),
                len(result.host_statistics), result.windows, result.max_buffered)

    metadata = {
        'pcap': args.pcap,
        'filter': config.get('pcap.filter'),
        'display_filter': config.get('pcap.display_filter'),
        'window_seconds': window,
        'epsilon_seconds': epsilon,
        'packets': result.records,
        'packets_without_hosts': result.records_without_hosts,
        'windows': result.windows,
        'hosts': len(result.host_statistics),
        'tool_version': __version__,
    }
    write_report(result, config, args.output, metadata)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        return run(args)
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 1
    except PacketRateError as e:
        print_error(str(e))
        return 1
    except OSError as e:
        print_error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
