"""packetrate Data Models"""

from .data_models import PacketRecord, WindowState, FileInfo

__all__ = ['PacketRecord', 'WindowState', 'FileInfo']
