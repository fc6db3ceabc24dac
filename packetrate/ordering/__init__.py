"""packetrate Ordering Module"""

from .reorderer import Reorderer, reorder

__all__ = ['Reorderer', 'reorder']
