"""packetrate exceptions"""

from common.utils import format_timestamp


class PacketRateError(Exception):
    """Base class for fatal packetrate errors"""
    pass


class ConfigurationError(PacketRateError):
    """Invalid run configuration, detected before any packet is processed"""
    pass


class FilterError(ConfigurationError):
    """Filter expression rejected by the capture backend"""
    pass


class ParseError(PacketRateError):
    """Capture file could not be decoded"""
    pass


class OrderingError(PacketRateError):
    """Reordered output went backwards in time

    Raised when a packet is emitted with a timestamp earlier than the
    previously emitted one, i.e. the capture is skewed by more than epsilon.
    """

    def __init__(self, previous: float, current: float, epsilon: float):
        self.previous = previous
        self.current = current
        self.epsilon = epsilon
        super().__init__(
            f"Stream sorting did not work, epsilon parameter is too small: "
            f"packet at {format_timestamp(current)} emitted after "
            f"{format_timestamp(previous)} (epsilon={epsilon:g}s, "
            f"skew >= {previous - current:.6f}s)"
        )
