"""
Packet Classifier
=================

Turns every raw byte blob from the radio into exactly one outcome:

- Telemetry: received data frame carrying a telemetry record
- Received: received data frame whose payload is not telemetry
- Status: send status report
- InvalidFrame: good outer frame, bad sub-frame layout
- Unrecognised: good outer frame, unknown frame type
- Invalid: outer frame failed to decode
"""

import logging
from dataclasses import dataclass
from typing import Union

from ..errors import FrameError, StructuralMismatch, TelemetryParseError
from ..radio.frame_codec import Frame, FrameType, decode
from ..radio.subframes import (
    InboundDataFrame,
    SendStatusFrame,
    to_inbound_data_frame,
    to_send_status_frame,
)
from .record import TelemetryRecord, parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Telemetry:
    """Received data frame that parsed as a telemetry record."""
    frame: Frame
    inbound: InboundDataFrame
    record: TelemetryRecord

    def __str__(self) -> str:
        return f"Telemetry - {self.record}"


@dataclass(frozen=True)
class Received:
    """Received data frame whose payload is not a telemetry record."""
    frame: Frame
    inbound: InboundDataFrame

    def __str__(self) -> str:
        return str(self.inbound)


@dataclass(frozen=True)
class Status:
    """Delivery report for a frame we sent."""
    frame: Frame
    status: SendStatusFrame

    def __str__(self) -> str:
        return str(self.status)


@dataclass(frozen=True)
class InvalidFrame:
    """Known frame type whose data does not fit its layout."""
    frame: Frame

    def __str__(self) -> str:
        return f"Invalid frame - {self.frame}"


@dataclass(frozen=True)
class Unrecognised:
    """Frame type we do not handle."""
    frame: Frame

    def __str__(self) -> str:
        return f"Unrecognised frame type - {self.frame}"


@dataclass(frozen=True)
class Invalid:
    """Bytes that are not a frame at all."""
    raw: bytes

    def __str__(self) -> str:
        text = self.raw.decode('utf-8', errors='replace')
        return f"Invalid data - {self.raw.hex(' ').upper()} - {text!r}"


ClassifiedOutcome = Union[Telemetry, Received, Status, InvalidFrame,
                          Unrecognised, Invalid]

OUTCOME_TYPES = (Telemetry, Received, Status, InvalidFrame, Unrecognised,
                 Invalid)


def classify(raw: bytes) -> ClassifiedOutcome:
    """
    Classify raw bytes from the radio.

    Never raises for codec failures; each one maps to an outcome and is
    logged as a warning.

    Args:
        raw: One delimited frame's worth of bytes

    Returns:
        Exactly one outcome
    """
    raw = bytes(raw)

    try:
        frame = decode(raw)
    except FrameError as e:
        logger.warning("Failed to parse radio data - %s", e)
        return Invalid(raw)

    if frame.frame_type == FrameType.RECEIVED_DATA:
        try:
            inbound = to_inbound_data_frame(frame)
        except StructuralMismatch as e:
            logger.warning("Failed to parse received data frame - %s", e)
            return InvalidFrame(frame)
    elif frame.frame_type == FrameType.SEND_STATUS:
        try:
            status = to_send_status_frame(frame)
        except StructuralMismatch as e:
            logger.warning("Failed to parse send status frame - %s", e)
            return InvalidFrame(frame)
        return Status(frame, status)
    else:
        logger.warning("Unrecognised frame type 0x%02X", frame.frame_type)
        return Unrecognised(frame)

    try:
        text = inbound.payload.decode('utf-8')
    except UnicodeDecodeError as e:
        logger.warning("Received data contained invalid UTF-8 - %s", e)
        return Received(frame, inbound)

    logger.debug("payload text=%r", text)
    try:
        record = parse(text)
    except TelemetryParseError as e:
        logger.warning("Failed to parse received data as telemetry - %s", e)
        return Received(frame, inbound)

    return Telemetry(frame, inbound, record)
