#!/usr/bin/env python3
"""
Ground Segment Example
======================

Demonstrates frame classification, commanding and the producer/consumer
pipeline without a radio attached.
"""

import struct
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from cansat_ground.radio import FrameType, encode
from cansat_ground.telecommand import CommandBuilder
from cansat_ground.telemetry import (
    MemorySink,
    ReplaySource,
    TelemetryProcessor,
    TelemetryProducer,
    channel,
    classify,
)
from cansat_ground.config import GeneratorConfig, ReplayConfig
from cansat_ground.telemetry.generator import TelemetryGenerator


def demonstrate_classification():
    """Classify a handful of hand-made frames."""
    print("=" * 60)
    print("Classifier Demonstration")
    print("=" * 60)

    generator = TelemetryGenerator(GeneratorConfig(seed=1))
    line = str(generator.next_record())
    header = struct.pack('>HBB', 0x0001, 0x28, 0x00)

    samples = {
        "telemetry": encode(FrameType.RECEIVED_DATA, header + line.encode()),
        "bad utf-8": encode(FrameType.RECEIVED_DATA, header + b'\xff\xfe'),
        "short text": encode(FrameType.RECEIVED_DATA, header + b'1047,12:00'),
        "send status": encode(FrameType.SEND_STATUS, bytes([7, 0])),
        "bad status": encode(FrameType.SEND_STATUS, bytes([7])),
        "unknown type": encode(0x00, b'\x01\x02'),
        "garbage": b'\x81',
    }

    for name, raw in samples.items():
        outcome = classify(raw)
        print(f"\n{name}: {type(outcome).__name__}")
        print(f"  {outcome}")


def demonstrate_commands():
    """Build payload commands."""
    print("\n" + "=" * 60)
    print("Command Demonstration")
    print("=" * 60)

    builder = CommandBuilder(team_id=1047)
    for result in (builder.telemetry(True), builder.set_time('GPS'),
                   builder.simulated_pressure(101325), builder.calibrate()):
        print(f"\n{result.description} (frame {result.frame_id})")
        print(f"  Text: {result.text}")
        print(f"  Frame: {result.frame.serialise().hex(' ').upper()}")

    print(f"\nStatistics: {builder.get_statistics()}")


def demonstrate_replay():
    """Replay the sample log through a producer thread."""
    print("\n" + "=" * 60)
    print("Replay Demonstration")
    print("=" * 60)

    path = Path(__file__).parent.parent.parent / "test_data" / "test_data.txt"
    source = ReplaySource(ReplayConfig(path=str(path), interval_s=0.0, loop=False))

    sender, receiver = channel()
    sink = MemorySink()
    processor = TelemetryProcessor(receiver, sink)

    producer = TelemetryProducer(source, sender, name="replay")
    producer.start()
    producer.join()

    while processor.connected:
        processor.poll()

    stats = processor.get_statistics()
    print(f"\nOutcomes: {stats['outcomes_by_type']}")
    print(f"Dropped packets: {stats['dropped_packets']}")
    altitude = stats['fields']['altitude']
    print(f"Altitude: max {altitude.maximum:.1f} m, mean {altitude.mean:.1f} m")
    print(f"Lines logged: {len(sink.lines)}")


if __name__ == "__main__":
    demonstrate_classification()
    demonstrate_commands()
    demonstrate_replay()

    print("\n" + "=" * 60)
    print("Ground segment examples complete!")
    print("=" * 60)
