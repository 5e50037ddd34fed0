"""
Error Taxonomy
==============

Exceptions raised by the radio and telemetry codecs.

The classifier captures every one of these into an outcome, so none of them
escapes the receive pipeline.
"""


class FrameError(ValueError):
    """Outer radio frame could not be decoded."""


class TooShort(FrameError):
    """Fewer bytes than the smallest valid frame."""

    def __init__(self, length: int, minimum: int):
        super().__init__(f"frame is {length} bytes, need at least {minimum}")
        self.length = length
        self.minimum = minimum


class ChecksumMismatch(FrameError):
    """Trailing checksum byte disagrees with the frame contents."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"checksum mismatch: expected 0x{expected:02X}, got 0x{received:02X}")
        self.expected = expected
        self.received = received


class StructuralMismatch(ValueError):
    """Frame decoded but its data does not fit the sub-frame layout."""

    def __init__(self, reason: str, frame_type: int):
        super().__init__(f"frame type 0x{frame_type:02X}: {reason}")
        self.reason = reason
        self.frame_type = frame_type


class TelemetryParseError(ValueError):
    """Text payload is not a telemetry record."""


class FieldCountMismatch(TelemetryParseError):
    """Wrong number of comma separated fields."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"expected {expected} fields, got {received}")
        self.expected = expected
        self.received = received


class FieldFormatError(TelemetryParseError):
    """A single field could not be decoded."""

    def __init__(self, index: int, name: str, value: str, reason: str = ""):
        message = f"field {index} ({name}) invalid: {value!r}"
        if reason:
            message += f" - {reason}"
        super().__init__(message)
        self.index = index
        self.name = name
        self.value = value


class ChannelClosed(Exception):
    """The consuming side of a channel has gone away."""


class ChannelDisconnected(Exception):
    """Every producer hung up and nothing is left in the channel."""
