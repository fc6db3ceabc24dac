import socket
import struct

import dpkt
import pytest

from packetrate.exceptions import ParseError
from packetrate.parser import PcapParser
from packetrate.parser.pcap_parser import DLT_LINUX_SLL2, DLT_RAW
from pcap_helpers import write_pcap


def ip_packet(src, dst):
    udp = dpkt.udp.UDP(sport=1234, dport=5678, data=b'payload')
    udp.ulen = len(udp)
    ip = dpkt.ip.IP(src=socket.inet_aton(src), dst=socket.inet_aton(dst),
                    p=dpkt.ip.IP_PROTO_UDP, data=udp)
    return bytes(ip)


def test_parse_ethernet_capture_in_file_order(capture_file):
    records = list(PcapParser().parse_file(capture_file))

    assert [r.timestamp for r in records] == [1000.0, 1001.0, 1000.5, 1002.0, 1007.0]
    assert records[0].src_ip == '10.0.0.1'
    assert records[0].dst_ip == '10.0.0.2'
    assert records[1].src_ip == '10.0.0.2'
    assert records[0].frame_len == 60


def test_non_ip_frame_has_no_hosts(capture_file):
    arp = list(PcapParser().parse_file(capture_file))[3]

    assert not arp.has_hosts
    assert arp.src_ip is None
    assert arp.frame_len == 42


def test_raw_ip_link_type(tmp_path):
    packet = ip_packet('172.16.0.1', '172.16.0.2')
    path = write_pcap(tmp_path / 'raw.pcap', [(1.0, packet)], linktype=DLT_RAW)

    record = next(PcapParser().parse_file(path))

    assert record.src_ip == '172.16.0.1'
    assert record.dst_ip == '172.16.0.2'
    assert record.frame_len == len(packet)


def test_sll2_link_type(tmp_path):
    header = struct.pack('!HHIHBB8s', 0x0800, 0, 2, 1, 0, 6, b'\x02\x00\x00\x00\x00\x01\x00\x00')
    frame = header + ip_packet('10.1.1.1', '10.2.2.2')
    path = write_pcap(tmp_path / 'sll2.pcap', [(1.0, frame)], linktype=DLT_LINUX_SLL2)

    record = next(PcapParser().parse_file(path))

    assert (record.src_ip, record.dst_ip) == ('10.1.1.1', '10.2.2.2')
    assert record.frame_len == len(frame)


def test_malformed_frame_is_kept_without_hosts(tmp_path):
    path = write_pcap(tmp_path / 'short.pcap', [(5.0, b'\x00\x01\x02')])

    record = next(PcapParser().parse_file(path))

    assert record.timestamp == 5.0
    assert not record.has_hosts


def test_unsupported_link_type(tmp_path):
    path = write_pcap(tmp_path / 'wifi.pcap', [(1.0, b'\x00' * 32)], linktype=105)

    with pytest.raises(ParseError, match='Unsupported link type'):
        list(PcapParser().parse_file(path))


def test_not_a_capture_file(tmp_path):
    path = tmp_path / 'notes.pcap'
    path.write_bytes(b'this is not a capture file at all')

    with pytest.raises(ParseError):
        list(PcapParser().parse_file(str(path)))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(PcapParser().parse_file(str(tmp_path / 'missing.pcap')))


def test_get_file_info(capture_file):
    info = PcapParser().get_file_info(capture_file)

    assert info.packet_count == 5
    assert info.first_packet_time.timestamp() == 1000.0
    assert info.last_packet_time.timestamp() == 1007.0
    assert info.duration == 7.0
    assert info.file_size > 0


def test_get_file_info_empty_capture(tmp_path):
    path = write_pcap(tmp_path / 'empty.pcap', [])

    info = PcapParser().get_file_info(path)

    assert info.packet_count == 0
    assert info.first_packet_time is None
    assert info.duration == 0.0
