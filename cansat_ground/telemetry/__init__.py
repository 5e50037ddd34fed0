"""
Ground Telemetry Processing
===========================

Classifies radio traffic into telemetry outcomes and carries them to the
consumer.
"""

from .record import TelemetryRecord, TelemetryField, parse, format_record
from .classifier import (
    ClassifiedOutcome,
    Invalid,
    InvalidFrame,
    Received,
    Status,
    Telemetry,
    Unrecognised,
    classify,
)
from .channel import Receiver, Sender, channel
from .processor import TelemetryProcessor
from .producer import ReplaySource, SerialSource, TelemetryProducer
from .sink import FileSink, MemorySink, TelemetrySink

__all__ = [
    'TelemetryRecord',
    'TelemetryField',
    'parse',
    'format_record',
    'ClassifiedOutcome',
    'Invalid',
    'InvalidFrame',
    'Received',
    'Status',
    'Telemetry',
    'Unrecognised',
    'classify',
    'Receiver',
    'Sender',
    'channel',
    'TelemetryProcessor',
    'ReplaySource',
    'SerialSource',
    'TelemetryProducer',
    'FileSink',
    'MemorySink',
    'TelemetrySink',
]
