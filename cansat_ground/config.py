"""
Ground Station Configuration
============================

Radio, replay, generator and station parameters.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class SerialConfig:
    """Serial connection to the ground radio."""
    port: str = "/dev/ttyUSB0"
    baudrate: int = 230400
    timeout_s: float = 0.1  # read timeout, bounds how long a read blocks
    read_size: int = 256
    max_frame_length: int = 256  # largest frame_type + data length accepted


@dataclass
class ReplayConfig:
    """File-based replay of a telemetry log."""
    path: str = "test_data/test_data.txt"
    interval_s: float = 1.0
    loop: bool = True
    source_address: int = 0xFFFF


@dataclass
class GeneratorConfig:
    """Synthetic telemetry generator parameters."""
    team_id: int = 1047
    sea_level_m: float = 1600.0
    failure_rate: float = 0.001  # fraction of packets deliberately not sent
    destination_address: int = 0xFFFF
    command_echo: str = "CXON"
    seed: Optional[int] = None

    # Uniform sampling ranges
    altitude_m: Tuple[float, float] = (0.0, 750.0)
    temperature_c: Tuple[float, float] = (12.0, 70.0)
    voltage_v: Tuple[float, float] = (4.8, 5.6)
    pressure_kpa: Tuple[float, float] = (80.0, 101.325)
    latitude_deg: Tuple[float, float] = (37.0, 37.4)
    longitude_deg: Tuple[float, float] = (-90.0, 80.0)
    satellites: Tuple[int, int] = (8, 35)  # high end exclusive
    tilt_deg: Tuple[float, float] = (-45.0, 45.0)
    delay_s: Tuple[float, float] = (0.5, 1.5)


@dataclass
class GroundStationConfig:
    """Top level station configuration."""
    team_id: int = 1047
    destination_address: int = 0xFFFF
    telemetry_file: str = "telemetry.csv"
    tick_s: float = 0.1
    max_history: int = 10000
    log_level: str = "INFO"

    serial: SerialConfig = field(default_factory=SerialConfig)
    replay: ReplayConfig = field(default_factory=ReplayConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
