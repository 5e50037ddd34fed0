"""
Radio Frame Codec
=================

Encodes and decodes the radio's API frames:

    [frame_type:1][data:N][checksum:1]

with checksum = 0xFF - (sum of frame_type and data bytes, truncated to 8 bits).
"""

from dataclasses import dataclass
from enum import IntEnum

from ..errors import ChecksumMismatch, TooShort


# frame_type + checksum
MIN_FRAME_LENGTH = 2


class FrameType(IntEnum):
    """Radio API frame types used by the ground station."""
    SEND_REQUEST = 0x01
    RECEIVED_DATA = 0x81
    SEND_STATUS = 0x89


@dataclass(frozen=True)
class Frame:
    """One decoded radio frame."""
    frame_type: int
    data: bytes
    checksum: int

    def serialise(self) -> bytes:
        """Frame bytes as they appear inside the API delimiter."""
        return bytes([self.frame_type]) + self.data + bytes([self.checksum])

    def __str__(self) -> str:
        return (f"Frame(type=0x{self.frame_type:02X}, "
                f"data={self.data.hex(' ').upper()}, "
                f"checksum=0x{self.checksum:02X})")


def checksum(frame_type: int, data: bytes) -> int:
    """
    Calculate the frame checksum.

    Args:
        frame_type: Frame type byte
        data: Frame data bytes

    Returns:
        Checksum byte
    """
    return 0xFF - ((frame_type + sum(data)) & 0xFF)


def decode(raw: bytes) -> Frame:
    """
    Decode a raw frame and verify its checksum.

    Args:
        raw: Frame bytes, type byte first and checksum byte last

    Returns:
        Decoded frame

    Raises:
        TooShort: fewer than 2 bytes
        ChecksumMismatch: trailing byte is not the checksum of the rest
    """
    raw = bytes(raw)
    if len(raw) < MIN_FRAME_LENGTH:
        raise TooShort(len(raw), MIN_FRAME_LENGTH)

    frame_type = raw[0]
    data = raw[1:-1]
    received = raw[-1]

    expected = checksum(frame_type, data)
    if expected != received:
        raise ChecksumMismatch(expected, received)

    return Frame(frame_type=frame_type, data=data, checksum=received)


def encode(frame_type: int, payload: bytes) -> bytes:
    """
    Encode a frame.

    Args:
        frame_type: Frame type byte
        payload: Frame data bytes

    Returns:
        Frame bytes with trailing checksum
    """
    if not 0 <= frame_type <= 0xFF:
        raise ValueError(f"frame type out of range: {frame_type}")
    payload = bytes(payload)
    return bytes([frame_type]) + payload + bytes([checksum(frame_type, payload)])
