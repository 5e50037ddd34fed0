"""
Telemetry Record
================

Parses and formats the payload's comma separated telemetry record:

    TEAM_ID,MISSION_TIME,PACKET_COUNT,MODE,STATE,ALTITUDE,HS_DEPLOYED,
    PC_DEPLOYED,MAST_RAISED,TEMPERATURE,VOLTAGE,PRESSURE,GPS_TIME,
    GPS_ALTITUDE,GPS_LATITUDE,GPS_LONGITUDE,GPS_SATS,TILT_X,TILT_Y,CMD_ECHO

Times are fixed width (HH:MM:SS.cc and HH:MM:SS) so that
parse(format(record)) == record.
"""

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Callable, List, Tuple

import numpy as np

from ..errors import FieldCountMismatch, FieldFormatError

SEPARATOR = ','

_UINT_RE = re.compile(r'[0-9]+')
_FLOAT_RE = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?')
_FLOAT_SPECIALS = ('nan', 'inf', '-inf')
_MISSION_TIME_RE = re.compile(r'([0-9]{2}):([0-9]{2}):([0-9]{2})\.([0-9]{2})')
_GPS_TIME_RE = re.compile(r'([0-9]{2}):([0-9]{2}):([0-9]{2})')


class Mode(Enum):
    FLIGHT = 'Flight'
    SIMULATION = 'Simulation'


class State(Enum):
    """Mission phase reported by the payload."""
    LAUNCH_WAIT = 'LaunchWait'
    ASCENT = 'Ascent'
    YEETED = 'Yeeted'  # separated from the rocket
    DESCENT = 'Descent'
    HS_RELEASED = 'HsReleased'
    LANDED = 'Landed'


class HsDeployed(Enum):
    DEPLOYED = 'Deployed'
    NOT_DEPLOYED = 'NotDeployed'


class PcDeployed(Enum):
    DEPLOYED = 'Deployed'
    NOT_DEPLOYED = 'NotDeployed'


class MastRaised(Enum):
    RAISED = 'Raised'
    NOT_RAISED = 'NotRaised'


@dataclass(frozen=True)
class MissionTime:
    """UTC mission time with centisecond resolution."""
    h: int
    m: int
    s: int
    cs: int

    def as_seconds(self) -> float:
        """Seconds since midnight."""
        return self.h * 3600 + self.m * 60 + self.s + self.cs / 100.0

    def __str__(self) -> str:
        return f"{self.h:02}:{self.m:02}:{self.s:02}.{self.cs:02}"


@dataclass(frozen=True)
class GpsTime:
    """UTC time from the GPS receiver."""
    h: int
    m: int
    s: int

    def as_seconds(self) -> float:
        return float(self.h * 3600 + self.m * 60 + self.s)

    def __str__(self) -> str:
        return f"{self.h:02}:{self.m:02}:{self.s:02}"


@dataclass(frozen=True)
class TelemetryRecord:
    """One telemetry sample from the payload."""
    team_id: int
    mission_time: MissionTime
    packet_count: int
    mode: Mode
    state: State
    altitude: float             # m
    hs_deployed: HsDeployed
    pc_deployed: PcDeployed
    mast_raised: MastRaised
    temperature: float          # deg C
    voltage: float              # V
    pressure: float             # kPa
    gps_time: GpsTime
    gps_altitude: float         # m
    gps_latitude: float         # deg
    gps_longitude: float        # deg
    gps_sats: int
    tilt_x: float               # deg
    tilt_y: float               # deg
    cmd_echo: str

    def get_field(self, field: 'TelemetryField') -> str:
        """Formatted text of a single field."""
        return _format_value(getattr(self, field.attribute))

    def __str__(self) -> str:
        return format(self)

    def __format__(self, spec: str) -> str:
        if spec:
            raise ValueError("telemetry records take no format spec")
        return format_record(self)


class TelemetryField(Enum):
    """Record fields in wire order, with their display labels."""
    TEAM_ID = ('team_id', 'Team ID')
    MISSION_TIME = ('mission_time', 'Mission Time')
    PACKET_COUNT = ('packet_count', 'Packet Count')
    MODE = ('mode', 'Mode')
    STATE = ('state', 'State')
    ALTITUDE = ('altitude', 'Altitude')
    HS_DEPLOYED = ('hs_deployed', 'Heat Shield Deployed')
    PC_DEPLOYED = ('pc_deployed', 'Parachute Deployed')
    MAST_RAISED = ('mast_raised', 'Mast Raised')
    TEMPERATURE = ('temperature', 'Temperature')
    VOLTAGE = ('voltage', 'Voltage')
    PRESSURE = ('pressure', 'Pressure')
    GPS_TIME = ('gps_time', 'GPS Time')
    GPS_ALTITUDE = ('gps_altitude', 'GPS Altitude')
    GPS_LATITUDE = ('gps_latitude', 'GPS Latitude')
    GPS_LONGITUDE = ('gps_longitude', 'GPS Longitude')
    GPS_SATS = ('gps_sats', 'GPS Satellites')
    TILT_X = ('tilt_x', 'Tilt X')
    TILT_Y = ('tilt_y', 'Tilt Y')
    CMD_ECHO = ('cmd_echo', 'Command Echo')

    @property
    def attribute(self) -> str:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    def __str__(self) -> str:
        return self.label


FIELD_COUNT = len(TelemetryField)

TELEMETRY_HEADER = SEPARATOR.join(f.name for f in TelemetryField)

# Numeric series worth graphing
GRAPHABLE_FIELDS = (
    TelemetryField.ALTITUDE,
    TelemetryField.TEMPERATURE,
    TelemetryField.VOLTAGE,
    TelemetryField.PRESSURE,
    TelemetryField.GPS_ALTITUDE,
    TelemetryField.GPS_LATITUDE,
    TelemetryField.GPS_LONGITUDE,
    TelemetryField.GPS_SATS,
    TelemetryField.TILT_X,
    TelemetryField.TILT_Y,
)


def _parse_uint(bits: int) -> Callable[[str], int]:
    limit = (1 << bits) - 1

    def parse_uint(text: str) -> int:
        if not _UINT_RE.fullmatch(text):
            raise ValueError("not an unsigned integer")
        value = int(text)
        if value > limit:
            raise ValueError(f"exceeds {limit}")
        return value

    return parse_uint


def _parse_float(text: str) -> float:
    if text in _FLOAT_SPECIALS or _FLOAT_RE.fullmatch(text):
        return float(text)
    raise ValueError("not a decimal number")


def _parse_clock(match: 're.Match') -> Tuple[int, int, int]:
    h, m, s = (int(g) for g in match.groups()[:3])
    if h > 23 or m > 59 or s > 59:
        raise ValueError("time component out of range")
    return h, m, s


def _parse_mission_time(text: str) -> MissionTime:
    match = _MISSION_TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError("expected HH:MM:SS.cc")
    h, m, s = _parse_clock(match)
    return MissionTime(h, m, s, int(match.group(4)))


def _parse_gps_time(text: str) -> GpsTime:
    match = _GPS_TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError("expected HH:MM:SS")
    return GpsTime(*_parse_clock(match))


def _parse_enum(enum_type) -> Callable[[str], Enum]:
    def parse_enum(text: str) -> Enum:
        # value lookup is exact and case-sensitive
        return enum_type(text)

    return parse_enum


def _parse_text(text: str) -> str:
    if "\r" in text or "\n" in text:
        raise ValueError("line break inside text field")
    return text


# Field decoders in wire order, matching TelemetryRecord's attributes
_DECODERS: List[Callable[[str], object]] = [
    _parse_uint(16),
    _parse_mission_time,
    _parse_uint(32),
    _parse_enum(Mode),
    _parse_enum(State),
    _parse_float,
    _parse_enum(HsDeployed),
    _parse_enum(PcDeployed),
    _parse_enum(MastRaised),
    _parse_float,
    _parse_float,
    _parse_float,
    _parse_gps_time,
    _parse_float,
    _parse_float,
    _parse_float,
    _parse_uint(8),
    _parse_float,
    _parse_float,
    _parse_text,
]


def parse(line: str) -> TelemetryRecord:
    """
    Parse a telemetry line.

    Args:
        line: Comma separated record, optionally ending in a newline

    Returns:
        Parsed record

    Raises:
        FieldCountMismatch: not exactly 20 fields
        FieldFormatError: first field that failed to decode
    """
    if line.endswith('\r\n'):
        line = line[:-2]
    elif line.endswith('\n'):
        line = line[:-1]

    parts = line.split(SEPARATOR)
    if len(parts) != FIELD_COUNT:
        raise FieldCountMismatch(FIELD_COUNT, len(parts))

    values = []
    for index, (field, decoder, text) in enumerate(
            zip(TelemetryField, _DECODERS, parts)):
        try:
            values.append(decoder(text))
        except ValueError as e:
            raise FieldFormatError(index, field.attribute, text, str(e)) from e

    return TelemetryRecord(*values)


def _format_value(value) -> str:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float):
        return np.format_float_positional(value, trim='-')
    return str(value)


def format_record(record: TelemetryRecord) -> str:
    """
    Format a record as a telemetry line (no trailing newline).

    Floats use the shortest positional decimal that parses back to the same
    value.

    Raises:
        ValueError: cmd_echo holds a separator or a line break
    """
    if any(c in record.cmd_echo for c in (SEPARATOR, "\r", "\n")):
        raise ValueError(f"cmd_echo cannot be framed: {record.cmd_echo!r}")
    return SEPARATOR.join(
        _format_value(getattr(record, f.name)) for f in fields(record))
