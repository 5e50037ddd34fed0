import logging
import random

import pytest

from cansat_ground.radio.frame_codec import FrameType, encode
from cansat_ground.telemetry.classifier import (
    OUTCOME_TYPES,
    Invalid,
    InvalidFrame,
    Received,
    Status,
    Telemetry,
    Unrecognised,
    classify,
)

from helpers import rx_frame


def test_data_frame_with_telemetry(sample_line):
    raw = encode(0x81, bytes([0x00, 0x01, 0x05, 0x00]) + sample_line.encode())
    outcome = classify(raw)

    assert isinstance(outcome, Telemetry)
    assert outcome.frame.frame_type == 0x81
    assert outcome.inbound.source_address == 0x0001
    assert outcome.inbound.signal_strength == 0x05
    assert outcome.record.team_id == 1047
    assert str(outcome) == f"Telemetry - {sample_line}"


def test_invalid_utf8_is_received():
    outcome = classify(rx_frame(b"\xff\xfe"))

    assert isinstance(outcome, Received)
    assert outcome.inbound.payload == b"\xff\xfe"


def test_missing_field_is_received(sample_line):
    truncated = ",".join(sample_line.split(",")[:-1])
    outcome = classify(rx_frame(truncated.encode()))

    assert isinstance(outcome, Received)
    assert outcome.inbound.payload == truncated.encode()


def test_empty_payload_is_received():
    assert isinstance(classify(rx_frame(b"")), Received)


def test_send_status():
    outcome = classify(encode(FrameType.SEND_STATUS, bytes([0x03, 0x00])))

    assert isinstance(outcome, Status)
    assert outcome.status.frame_id == 3
    assert outcome.status.delivered


@pytest.mark.parametrize("raw", [
    encode(FrameType.RECEIVED_DATA, b"\x00\x01\x05"),
    encode(FrameType.SEND_STATUS, b"\x01"),
    encode(FrameType.SEND_STATUS, b"\x01\x00\x00"),
])
def test_bad_sub_frame_is_invalid_frame(raw):
    outcome = classify(raw)

    assert isinstance(outcome, InvalidFrame)
    assert outcome.frame.serialise() == raw


@pytest.mark.parametrize("frame_type", [0x00, 0x01, 0x88, 0x90, 0xFF])
def test_other_frame_types_unrecognised(frame_type):
    outcome = classify(encode(frame_type, b"\x00\x01\x05\x00"))

    assert isinstance(outcome, Unrecognised)
    assert outcome.frame.frame_type == frame_type


@pytest.mark.parametrize("raw", [b"", b"\x81"])
def test_short_input_is_invalid(raw):
    outcome = classify(raw)

    assert isinstance(outcome, Invalid)
    assert outcome.raw == raw


def test_bad_checksum_is_invalid(sample_line):
    raw = bytearray(rx_frame(sample_line.encode()))
    raw[-1] ^= 0xFF
    outcome = classify(bytes(raw))

    assert isinstance(outcome, Invalid)
    assert outcome.raw == bytes(raw)


def test_failures_are_logged_as_warnings(caplog):
    with caplog.at_level(logging.WARNING, logger="cansat_ground"):
        classify(b"\x81")
        classify(rx_frame(b"\xff"))
        classify(encode(FrameType.SEND_STATUS, b""))

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 3


def test_classify_is_total_over_random_input():
    rng = random.Random(1234)
    for _ in range(2000):
        length = rng.randrange(0, 64)
        raw = bytes(rng.randrange(256) for _ in range(length))
        assert isinstance(classify(raw), OUTCOME_TYPES)


def test_classify_is_total_over_random_valid_frames():
    rng = random.Random(99)
    frame_types = [FrameType.RECEIVED_DATA, FrameType.SEND_STATUS, 0x00, 0x90]
    for _ in range(2000):
        data = bytes(rng.randrange(256) for _ in range(rng.randrange(0, 40)))
        outcome = classify(encode(rng.choice(frame_types), data))
        assert isinstance(outcome, OUTCOME_TYPES)
        assert not isinstance(outcome, Invalid)


def test_outcome_str_is_printable():
    for raw in (b"\x81", encode(0x00, b""), rx_frame(b"\xff"),
                encode(FrameType.SEND_STATUS, b"\x01")):
        assert str(classify(raw))
