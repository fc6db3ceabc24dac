"""packetrate Parser Module"""

from .pcap_parser import PcapParser
from .bpf_parser import BpfParser
from .tshark_parser import TsharkParser

__all__ = ['PcapParser', 'BpfParser', 'TsharkParser']
