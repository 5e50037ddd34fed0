from datetime import datetime, timezone

import numpy as np

from cansat_ground.config import GeneratorConfig
from cansat_ground.radio.frame_codec import FrameType
from cansat_ground.telemetry.generator import TelemetryGenerator
from cansat_ground.telemetry.record import GpsTime, MissionTime, State, format_record, parse


FIXED_NOW = datetime(2023, 6, 10, 14, 5, 9, 870000, tzinfo=timezone.utc)


def make_generator(**overrides) -> TelemetryGenerator:
    config = GeneratorConfig(**overrides)
    return TelemetryGenerator(config, rng=np.random.default_rng(7), clock=lambda: FIXED_NOW)


def test_records_within_configured_ranges():
    generator = make_generator()
    cfg = generator.config

    for expected_count in range(200):
        record = generator.next_record()
        assert record.packet_count == expected_count
        assert record.team_id == 1047
        assert cfg.altitude_m[0] <= record.altitude <= cfg.altitude_m[1]
        assert record.gps_altitude == cfg.sea_level_m + record.altitude
        assert cfg.voltage_v[0] <= record.voltage <= cfg.voltage_v[1]
        assert cfg.longitude_deg[0] <= record.gps_longitude <= cfg.longitude_deg[1]
        assert cfg.satellites[0] <= record.gps_sats < cfg.satellites[1]
        assert -45.0 <= record.tilt_x <= 45.0
        assert record.state is State.YEETED
        assert record.cmd_echo == "CXON"


def test_times_come_from_clock():
    record = make_generator().next_record()
    assert record.mission_time == MissionTime(14, 5, 9, 87)
    assert record.gps_time == GpsTime(14, 5, 9)


def test_generated_records_roundtrip():
    generator = make_generator()
    for _ in range(50):
        record = generator.next_record()
        assert parse(format_record(record)) == record


def test_next_frame_is_send_request_with_telemetry():
    generator = make_generator(failure_rate=0.0)
    frame = generator.next_frame()

    assert frame.frame_type == FrameType.SEND_REQUEST
    assert frame.data[0] == 0
    assert frame.data[1:3] == b"\xff\xff"
    record = parse(frame.data[3:].decode("utf-8"))
    assert record.packet_count == 0
    assert generator.next_frame().data[0] == 1


def test_failed_packets_still_advance_counters():
    generator = make_generator(failure_rate=1.0)

    assert generator.next_frame() is None
    assert generator.next_frame() is None
    assert generator.stats == {'generated': 2, 'dropped': 2}
    assert generator.packet_count == 2
    assert generator.frame_id == 2


def test_frame_id_wraps():
    generator = make_generator(failure_rate=0.0)
    generator.frame_id = 255

    assert generator.next_frame().data[0] == 255
    assert generator.frame_id == 0


def test_seeded_generators_repeat():
    a = TelemetryGenerator(GeneratorConfig(seed=3), clock=lambda: FIXED_NOW)
    b = TelemetryGenerator(GeneratorConfig(seed=3), clock=lambda: FIXED_NOW)
    assert a.next_record() == b.next_record()


def test_delay_in_range():
    generator = make_generator()
    assert all(0.5 <= generator.delay() <= 1.5 for _ in range(100))
