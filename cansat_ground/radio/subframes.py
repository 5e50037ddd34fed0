"""
Sub-Frame Decoders
==================

Frame-type specific payload layouts:

- received data (0x81): source address, signal strength, options, payload
- send status (0x89): frame id, status code
- send request (0x01): frame id, destination address, payload
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from ..errors import StructuralMismatch
from .frame_codec import Frame, FrameType, decode, encode


RECEIVED_DATA_HEADER_LENGTH = 4
SEND_STATUS_LENGTH = 2

BROADCAST_ADDRESS = 0xFFFF


class SendStatusCode(IntEnum):
    """Delivery status reported for a send request."""
    SUCCESS = 0
    NO_ACK = 1
    CCA_FAILURE = 2
    PURGED = 3


@dataclass(frozen=True)
class InboundDataFrame:
    """Data received over the air."""
    source_address: int
    signal_strength: int
    options: int
    payload: bytes

    def __str__(self) -> str:
        return (f"Received from 0x{self.source_address:04X} "
                f"(rssi -{self.signal_strength} dBm, options 0x{self.options:02X}): "
                f"{self.payload!r}")


@dataclass(frozen=True)
class SendStatusFrame:
    """Delivery report for an earlier send request."""
    frame_id: int
    status_code: int

    @property
    def status(self) -> Union[SendStatusCode, int]:
        """Known status code, or the raw value."""
        try:
            return SendStatusCode(self.status_code)
        except ValueError:
            return self.status_code

    @property
    def delivered(self) -> bool:
        return self.status_code == SendStatusCode.SUCCESS

    def __str__(self) -> str:
        status = self.status
        name = status.name if isinstance(status, SendStatusCode) else f"0x{status:02X}"
        return f"Send status for frame {self.frame_id}: {name}"


@dataclass(frozen=True)
class SendRequest:
    """Outbound text addressed to a remote radio."""
    frame_id: int
    destination_address: int
    payload: str

    def to_frame(self) -> Frame:
        """Encode as a send request frame."""
        return build_send_request(self.frame_id, self.destination_address,
                                  self.payload)


def to_inbound_data_frame(frame: Frame) -> InboundDataFrame:
    """
    Interpret a received data frame.

    Args:
        frame: Decoded frame of type RECEIVED_DATA

    Returns:
        Inbound data frame

    Raises:
        StructuralMismatch: wrong frame type or data shorter than the header
    """
    if frame.frame_type != FrameType.RECEIVED_DATA:
        raise StructuralMismatch("not a received data frame", frame.frame_type)

    if len(frame.data) < RECEIVED_DATA_HEADER_LENGTH:
        raise StructuralMismatch(
            f"too short: {len(frame.data)} data bytes, "
            f"need at least {RECEIVED_DATA_HEADER_LENGTH}",
            frame.frame_type)

    source_address, signal_strength, options = struct.unpack(
        '>HBB', frame.data[:RECEIVED_DATA_HEADER_LENGTH])

    return InboundDataFrame(
        source_address=source_address,
        signal_strength=signal_strength,
        options=options,
        payload=frame.data[RECEIVED_DATA_HEADER_LENGTH:],
    )


def to_send_status_frame(frame: Frame) -> SendStatusFrame:
    """
    Interpret a send status frame.

    Raises:
        StructuralMismatch: wrong frame type or data is not exactly 2 bytes
    """
    if frame.frame_type != FrameType.SEND_STATUS:
        raise StructuralMismatch("not a send status frame", frame.frame_type)

    if len(frame.data) != SEND_STATUS_LENGTH:
        raise StructuralMismatch(
            f"expected {SEND_STATUS_LENGTH} data bytes, got {len(frame.data)}",
            frame.frame_type)

    return SendStatusFrame(frame_id=frame.data[0], status_code=frame.data[1])


def build_send_request(frame_id: int, destination_address: int,
                       text: str) -> Frame:
    """
    Build a send request frame.

    Args:
        frame_id: Frame id echoed back in the send status
        destination_address: 16-bit address of the receiving radio
        text: Payload text, sent as UTF-8

    Returns:
        Encoded send request frame
    """
    if not 0 <= frame_id <= 0xFF:
        raise ValueError(f"frame id out of range: {frame_id}")
    if not 0 <= destination_address <= 0xFFFF:
        raise ValueError(f"destination address out of range: {destination_address}")

    payload = struct.pack('>BH', frame_id, destination_address) + text.encode('utf-8')
    return decode(encode(FrameType.SEND_REQUEST, payload))
