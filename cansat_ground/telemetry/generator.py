"""
Synthetic Telemetry Generator
=============================

Produces plausible telemetry from uniform distributions, for exercising the
ground station without a flight payload.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import numpy as np

from ..config import GeneratorConfig
from ..radio.frame_codec import Frame
from ..radio.subframes import build_send_request
from .record import (
    GpsTime,
    HsDeployed,
    MastRaised,
    MissionTime,
    Mode,
    PcDeployed,
    State,
    TelemetryRecord,
    format_record,
)

logger = logging.getLogger(__name__)


class TelemetryGenerator:
    """
    Random telemetry source.

    Packet count and frame id advance on every frame, including the ones
    dropped to simulate link loss.
    """

    def __init__(self, config: GeneratorConfig = None,
                 rng: Optional[np.random.Generator] = None,
                 clock: Callable[[], datetime] = None):
        """
        Initialize generator.

        Args:
            config: Generator configuration
            rng: Random generator (default: seeded from config.seed)
            clock: Returns the current UTC time
        """
        self.config = config or GeneratorConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.packet_count = 0
        self.frame_id = 0
        self.stats = {
            'generated': 0,
            'dropped': 0,
        }

    def _uniform(self, bounds) -> float:
        low, high = bounds
        return float(self.rng.uniform(low, high))

    def next_record(self) -> TelemetryRecord:
        """Draw one record and advance the packet count."""
        cfg = self.config
        now = self._clock()
        altitude = self._uniform(cfg.altitude_m)
        low, high = cfg.satellites

        record = TelemetryRecord(
            team_id=cfg.team_id,
            mission_time=MissionTime(now.hour, now.minute, now.second,
                                     now.microsecond // 10000),
            packet_count=self.packet_count,
            mode=Mode.FLIGHT if self.rng.random() < 0.5 else Mode.SIMULATION,
            state=State.YEETED,
            altitude=altitude,
            hs_deployed=HsDeployed.DEPLOYED,
            pc_deployed=PcDeployed.DEPLOYED,
            mast_raised=MastRaised.RAISED,
            temperature=self._uniform(cfg.temperature_c),
            voltage=self._uniform(cfg.voltage_v),
            pressure=self._uniform(cfg.pressure_kpa),
            gps_time=GpsTime(now.hour, now.minute, now.second),
            gps_altitude=cfg.sea_level_m + altitude,
            gps_latitude=self._uniform(cfg.latitude_deg),
            gps_longitude=self._uniform(cfg.longitude_deg),
            gps_sats=int(self.rng.integers(low, high)),
            tilt_x=self._uniform(cfg.tilt_deg),
            tilt_y=self._uniform(cfg.tilt_deg),
            cmd_echo=cfg.command_echo,
        )

        self.packet_count = (self.packet_count + 1) & 0xFFFFFFFF
        self.stats['generated'] += 1
        return record

    def next_frame(self) -> Optional[Frame]:
        """
        Draw a record and wrap it in a send request.

        Returns:
            Send request frame, or None when the packet was artificially lost
        """
        record = self.next_record()
        frame_id = self.frame_id
        self.frame_id = (self.frame_id + 1) & 0xFF

        if self.rng.random() < self.config.failure_rate:
            self.stats['dropped'] += 1
            logger.info("Artificially failed a packet: %s", record)
            return None

        return build_send_request(frame_id, self.config.destination_address,
                                  format_record(record))

    def delay(self) -> float:
        """Seconds to wait before the next packet."""
        return self._uniform(self.config.delay_s)
