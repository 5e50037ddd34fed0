"""
Telemetry Producers
===================

Threads that read an input source, classify each unit of input and send the
outcome to the consumer.
"""

import logging
import struct
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from ..config import ReplayConfig
from ..errors import ChannelClosed
from ..radio.frame_codec import FrameType, encode
from ..radio.serial_link import SerialTransport
from .channel import Sender
from .classifier import ClassifiedOutcome, classify

logger = logging.getLogger(__name__)


class TelemetryProducer(threading.Thread):
    """
    Producer thread.

    Runs until the source ends or the consumer goes away, then hangs up its
    sender.
    """

    def __init__(self, source: Iterable[bytes], sender: Sender,
                 name: str = "producer",
                 classifier: Callable[[bytes], ClassifiedOutcome] = classify):
        """
        Initialize producer.

        Args:
            source: Iterable of raw frames (one frame per item)
            sender: Channel sender owned by this producer
            name: Thread name
            classifier: Raw bytes -> outcome
        """
        super().__init__(name=name, daemon=True)
        self.source = source
        self.sender = sender
        self.classifier = classifier
        self.stats = {
            'frames_read': 0,
            'outcomes_sent': 0,
        }
        self.consumer_gone = False

    def run(self):
        try:
            for raw in self.source:
                self.stats['frames_read'] += 1
                outcome = self.classifier(raw)
                try:
                    self.sender.send(outcome)
                except ChannelClosed:
                    logger.warning("%s: consumer disconnected, stopping", self.name)
                    self.consumer_gone = True
                    return
                self.stats['outcomes_sent'] += 1
            logger.info("%s: end of input after %d frames",
                        self.name, self.stats['frames_read'])
        finally:
            self.sender.close()


class ReplaySource:
    """
    Replays a telemetry log as received data frames.

    Each non-blank line is wrapped in a received data frame so that it takes
    the same classification path as live radio traffic.
    """

    def __init__(self, config: ReplayConfig = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize replay source.

        Args:
            config: Replay configuration
            sleep: Delay function between lines
        """
        self.config = config or ReplayConfig()
        self._sleep = sleep

    def _read_lines(self):
        path = Path(self.config.path)
        with path.open('r', encoding='utf-8', errors='surrogateescape') as f:
            return [line.rstrip('\r\n') for line in f if line.strip()]

    def frame_for(self, line: str) -> bytes:
        """Wrap one log line as a received data frame."""
        address = self.config.source_address
        header = struct.pack('>HBB', address, 0, 0)
        payload = line.encode('utf-8', errors='surrogateescape')
        return encode(FrameType.RECEIVED_DATA, header + payload)

    def __iter__(self) -> Iterator[bytes]:
        lines = self._read_lines()
        if not lines:
            logger.warning("Replay file %s has no telemetry lines", self.config.path)
            return

        logger.info("Replaying %d lines from %s", len(lines), self.config.path)
        while True:
            for line in lines:
                logger.debug("line = %r", line)
                yield self.frame_for(line)
                self._sleep(self.config.interval_s)
            if not self.config.loop:
                return


class SerialSource:
    """Live frames from the ground radio."""

    def __init__(self, transport: SerialTransport):
        self.transport = transport

    def __iter__(self) -> Iterator[bytes]:
        return self.transport.frames()


def start_producer(source: Iterable[bytes], sender: Sender,
                   name: Optional[str] = None) -> TelemetryProducer:
    """Create and start a producer thread."""
    producer = TelemetryProducer(source, sender, name=name or "producer")
    producer.start()
    return producer
