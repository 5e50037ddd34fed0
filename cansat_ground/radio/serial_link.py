"""
Serial Radio Link
=================

Delimits API frames on the radio's serial line:

    0x7E | length (u16, big-endian) | frame_type | data | checksum

The length counts frame_type and data. Frames handed on are the bytes from
frame_type through checksum; the checksum itself is verified by the frame
codec, not here.
"""

import logging
import struct
from typing import Iterator, List, Optional

import serial

from ..config import SerialConfig
from .frame_codec import Frame

logger = logging.getLogger(__name__)


START_DELIMITER = 0x7E
HEADER_LENGTH = 3  # delimiter + length


def wrap_api_frame(frame_bytes: bytes) -> bytes:
    """
    Add the start delimiter and length to serialised frame bytes.

    Args:
        frame_bytes: frame_type, data and checksum

    Returns:
        Bytes ready to write to the serial line
    """
    if len(frame_bytes) < 2:
        raise ValueError("frame needs at least a type and a checksum byte")
    length = len(frame_bytes) - 1
    if length > 0xFFFF:
        raise ValueError(f"frame too long for the length field: {length}")
    return struct.pack('>BH', START_DELIMITER, length) + bytes(frame_bytes)


class ApiFrameReader:
    """
    Incremental API frame delimiter.

    Feed it whatever the serial port returns; it hands back complete frames.
    """

    def __init__(self, max_frame_length: int = 256):
        """
        Initialize reader.

        Args:
            max_frame_length: Largest accepted length field value
        """
        self.max_frame_length = max_frame_length
        self._buffer = bytearray()
        self.stats = {
            'frames': 0,
            'discarded_bytes': 0,
            'bad_lengths': 0,
        }

    def feed(self, chunk: bytes) -> List[bytes]:
        """
        Add bytes and return any frames that are now complete.

        Args:
            chunk: Bytes read from the line

        Returns:
            Complete frames in arrival order
        """
        self._buffer.extend(chunk)
        frames = []

        while True:
            start = self._buffer.find(START_DELIMITER)
            if start < 0:
                self._discard(len(self._buffer))
                break
            if start > 0:
                self._discard(start)

            if len(self._buffer) < HEADER_LENGTH:
                break

            length = struct.unpack('>H', self._buffer[1:HEADER_LENGTH])[0]
            if length == 0 or length > self.max_frame_length:
                logger.warning("Discarding frame with bad length %d", length)
                self.stats['bad_lengths'] += 1
                # resync on the next delimiter
                self._discard(1)
                continue

            total = HEADER_LENGTH + length + 1
            if len(self._buffer) < total:
                break

            frames.append(bytes(self._buffer[HEADER_LENGTH:total]))
            del self._buffer[:total]
            self.stats['frames'] += 1

        return frames

    def _discard(self, count: int):
        if count:
            logger.debug("Discarding %d bytes before start delimiter", count)
            self.stats['discarded_bytes'] += count
            del self._buffer[:count]

    @property
    def pending(self) -> int:
        """Bytes buffered towards an incomplete frame."""
        return len(self._buffer)


class SerialTransport:
    """
    Serial connection to the ground radio.

    Supplies one frame's worth of bytes at a time and writes outbound frames.
    """

    def __init__(self, config: SerialConfig = None,
                 port: Optional[serial.SerialBase] = None):
        """
        Initialize transport.

        Args:
            config: Serial configuration
            port: Already constructed port (opened by the caller)
        """
        self.config = config or SerialConfig()
        self._port = port
        self._reader = ApiFrameReader(self.config.max_frame_length)
        self.error: Optional[serial.SerialException] = None

    def open(self):
        """Open the serial port if one was not injected."""
        if self._port is None:
            logger.info("Opening %s at %d baud",
                        self.config.port, self.config.baudrate)
            self._port = serial.Serial(
                self.config.port,
                self.config.baudrate,
                timeout=self.config.timeout_s,
            )

    def close(self):
        """Close the serial port."""
        if self._port is not None:
            self._port.close()

    @property
    def is_open(self) -> bool:
        return self._port is not None and self._port.is_open

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def frames(self) -> Iterator[bytes]:
        """
        Yield inbound frames until the port closes or fails.

        A port that cannot be opened or read is logged and ends the stream;
        the error is kept in ``self.error``.

        Yields:
            Frame bytes, frame_type first, checksum last
        """
        try:
            self.open()
        except serial.SerialException as e:
            logger.error("Cannot open %s: %s", self.config.port, e)
            self.error = e
            return

        while self.is_open:
            try:
                chunk = self._port.read(self.config.read_size)
            except serial.SerialException as e:
                logger.error("Serial read failed on %s: %s", self.config.port, e)
                self.error = e
                return

            if not chunk:
                continue

            for frame in self._reader.feed(chunk):
                yield frame

    def send(self, frame: Frame):
        """
        Write a frame to the radio.

        Args:
            frame: Frame to transmit
        """
        self.open()
        self._port.write(wrap_api_frame(frame.serialise()))
        self._port.flush()
