import logging

import numpy as np

from cansat_ground.radio.frame_codec import FrameType, encode
from cansat_ground.telemetry.channel import channel
from cansat_ground.telemetry.classifier import Status, Telemetry, classify
from cansat_ground.telemetry.processor import TelemetryProcessor
from cansat_ground.telemetry.record import TelemetryField
from cansat_ground.telemetry.sink import MemorySink

from helpers import rx_frame, telemetry_line


def _send_all(sender, frames, close=True):
    for raw in frames:
        sender.send(classify(raw))
    if close:
        sender.close()


def test_poll_logs_telemetry_to_sink():
    sender, receiver = channel()
    sink = MemorySink()
    processor = TelemetryProcessor(receiver, sink)

    lines = [telemetry_line(n) for n in range(3)]
    _send_all(sender, [rx_frame(l.encode()) for l in lines] + [b"\x81"])

    outcomes = processor.poll()
    assert len(outcomes) == 4
    assert sink.lines == lines
    assert processor.connected is False

    stats = processor.get_statistics()
    assert stats['telemetry_received'] == 3
    assert stats['outcomes_by_type'] == {'Telemetry': 3, 'Invalid': 1}
    assert stats['fields']['altitude'].count == 3


def test_poll_without_data_keeps_connection():
    sender, receiver = channel()
    processor = TelemetryProcessor(receiver)

    assert processor.poll() == []
    assert processor.connected is True
    sender.close()
    assert processor.poll() == []
    assert processor.connected is False


def test_disconnect_logged_once(caplog):
    sender, receiver = channel()
    processor = TelemetryProcessor(receiver)
    sender.close()

    with caplog.at_level(logging.WARNING):
        processor.poll()
        processor.poll()
    assert sum("disconnected" in r.getMessage() for r in caplog.records) == 1


def test_dropped_packets_counted_per_team():
    sender, receiver = channel()
    processor = TelemetryProcessor(receiver)

    counts = [(1047, 0), (1047, 1), (2000, 10), (1047, 4), (2000, 11), (1047, 5)]
    _send_all(sender, [rx_frame(telemetry_line(c, team).encode()) for team, c in counts])
    processor.poll()

    assert processor.stats['dropped_packets'] == 2


def test_callbacks_dispatched_and_errors_contained():
    sender, receiver = channel()
    processor = TelemetryProcessor(receiver)

    telemetry, statuses, everything = [], [], []
    processor.register_telemetry_callback(telemetry.append)
    processor.register_status_callback(statuses.append)
    processor.register_outcome_callback(everything.append)

    def broken(outcome):
        raise RuntimeError("boom")

    processor.register_outcome_callback(broken)

    _send_all(sender, [
        rx_frame(telemetry_line(0).encode()),
        encode(FrameType.SEND_STATUS, b"\x09\x00"),
        encode(0x00, b""),
    ])
    processor.poll()

    assert len(telemetry) == 1 and isinstance(telemetry[0], Telemetry)
    assert len(statuses) == 1 and isinstance(statuses[0], Status)
    assert len(everything) == 3
    assert processor.stats['callback_errors'] == 3


def test_history_is_bounded_and_queryable():
    sender, receiver = channel()
    processor = TelemetryProcessor(receiver, max_history=5)

    _send_all(sender, [rx_frame(telemetry_line(n).encode()) for n in range(8)])
    processor.poll()

    latest = processor.get_latest(3)
    assert [r.packet_count for r in latest] == [5, 6, 7]
    assert processor.get_latest(0) == []
    assert len(processor.get_latest(100)) == 5

    series = processor.series(TelemetryField.PACKET_COUNT)
    assert isinstance(series, np.ndarray)
    assert series.tolist() == [3.0, 4.0, 5.0, 6.0, 7.0]

    processor.clear_history()
    assert processor.get_latest() == []
    assert processor.get_statistics()['fields'] == {}
