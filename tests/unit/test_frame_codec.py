import pytest

from cansat_ground.errors import ChecksumMismatch, FrameError, TooShort
from cansat_ground.radio.frame_codec import Frame, FrameType, checksum, decode, encode


def test_checksum_matches_known_radio_frame():
    # AT command "NI": 7E 00 04 08 01 4E 49 5F
    assert checksum(0x08, bytes([0x01, 0x4E, 0x49])) == 0x5F

    frame = decode(bytes([0x08, 0x01, 0x4E, 0x49, 0x5F]))
    assert frame == Frame(frame_type=0x08, data=bytes([0x01, 0x4E, 0x49]), checksum=0x5F)


def test_send_status_frame_checksum():
    # 7E 00 03 89 01 00 75
    raw = encode(FrameType.SEND_STATUS, bytes([0x01, 0x00]))
    assert raw == bytes([0x89, 0x01, 0x00, 0x75])


@pytest.mark.parametrize("frame_type,payload", [
    (0x81, b""),
    (0x81, b"\x00\x01\x05\x00hello"),
    (0x00, bytes(range(256))),
    (0xFF, b"\xff" * 300),
])
def test_encode_decode_roundtrip(frame_type, payload):
    frame = decode(encode(frame_type, payload))
    assert frame.frame_type == frame_type
    assert frame.data == payload
    assert frame.checksum == checksum(frame_type, payload)
    assert frame.serialise() == encode(frame_type, payload)


@pytest.mark.parametrize("raw", [b"", b"\x81"])
def test_decode_rejects_short_input(raw):
    with pytest.raises(TooShort) as exc:
        decode(raw)
    assert exc.value.length == len(raw)
    assert isinstance(exc.value, FrameError)


def test_minimal_frame_is_type_and_checksum():
    frame = decode(bytes([0x00, 0xFF]))
    assert frame.frame_type == 0x00
    assert frame.data == b""


@pytest.mark.parametrize("bit", range(8))
def test_flipping_checksum_bit_fails(bit):
    raw = bytearray(encode(0x81, b"\x00\x01\x05\x00payload"))
    raw[-1] ^= 1 << bit

    with pytest.raises(ChecksumMismatch) as exc:
        decode(bytes(raw))
    assert exc.value.received == raw[-1]


def test_corrupted_data_byte_fails():
    raw = bytearray(encode(0x81, b"\x00\x01\x05\x00payload"))
    raw[5] ^= 0x10

    with pytest.raises(ChecksumMismatch):
        decode(bytes(raw))


def test_encode_rejects_out_of_range_type():
    with pytest.raises(ValueError):
        encode(0x100, b"")
