import struct

from cansat_ground.radio.frame_codec import FrameType, encode


SAMPLE_LINE = (
    "1047,13:02:11.04,0,Flight,LaunchWait,0.4,NotDeployed,NotDeployed,"
    "NotRaised,21.3,5.42,101.2,13:02:11,1600.4,37.2241,-80.4325,9,0.5,-0.3,CXON"
)


def rx_frame(payload: bytes, source: int = 0x0001, rssi: int = 0x05,
             options: int = 0x00) -> bytes:
    """Encoded received data frame."""
    return encode(FrameType.RECEIVED_DATA,
                  struct.pack('>HBB', source, rssi, options) + payload)


def telemetry_line(packet_count: int = 0, team_id: int = 1047) -> str:
    fields = SAMPLE_LINE.split(',')
    fields[0] = str(team_id)
    fields[2] = str(packet_count)
    return ','.join(fields)
