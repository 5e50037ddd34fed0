"""
Radio Link
==========

Radio API frame codec, sub-frame layouts and the serial transport.
"""

from .frame_codec import Frame, FrameType, checksum, decode, encode
from .subframes import (
    BROADCAST_ADDRESS,
    InboundDataFrame,
    SendRequest,
    SendStatusCode,
    SendStatusFrame,
    build_send_request,
    to_inbound_data_frame,
    to_send_status_frame,
)
from .serial_link import ApiFrameReader, SerialTransport, wrap_api_frame

__all__ = [
    'Frame',
    'FrameType',
    'checksum',
    'decode',
    'encode',
    'BROADCAST_ADDRESS',
    'InboundDataFrame',
    'SendRequest',
    'SendStatusCode',
    'SendStatusFrame',
    'build_send_request',
    'to_inbound_data_frame',
    'to_send_status_frame',
    'ApiFrameReader',
    'SerialTransport',
    'wrap_api_frame',
]
