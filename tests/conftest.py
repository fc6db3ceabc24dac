import pytest

from packetrate.models import PacketRecord
from pcap_helpers import arp_frame, ipv4_frame, write_pcap


@pytest.fixture
def make_record():
    def _make(timestamp, frame_len=100, src_ip='10.0.0.1', dst_ip='10.0.0.2'):
        return PacketRecord(timestamp=timestamp, frame_len=frame_len, src_ip=src_ip, dst_ip=dst_ip)
    return _make


@pytest.fixture
def capture_file(tmp_path):
    """Small out-of-order Ethernet capture: two hosts talking, one ARP frame"""
    frames = [
        (1000.0, ipv4_frame('10.0.0.1', '10.0.0.2')),
        (1001.0, ipv4_frame('10.0.0.2', '10.0.0.1')),
        (1000.5, ipv4_frame('10.0.0.1', '10.0.0.2')),
        (1002.0, arp_frame()),
        (1007.0, ipv4_frame('10.0.0.1', '10.0.0.3')),
    ]
    return write_pcap(tmp_path / 'capture.pcap', frames)
