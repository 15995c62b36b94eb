import pytest

from webm_demuxer.demux.errors import MalformedVarInt, TruncatedInput
from webm_demuxer.demux.vint import decode_vint, encode_vint, vint_width


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x81", (1, 1)),
        (b"\x82", (2, 1)),
        (b"\xfe", (126, 1)),
        (b"\x40\x01", (1, 2)),
        (b"\x41\x00", (256, 2)),
        (b"\x20\x00\x01", (1, 3)),
        (b"\x10\x00\x00\x02", (2, 4)),
        (b"\x01\x00\x00\x00\x00\x00\x01\x00", (256, 8)),
    ],
)
def test_decode_vint_known_values(data, expected):
    assert decode_vint(data) == expected


def test_decode_vint_at_offset():
    data = b"\xff\xff\x42\x10\x99"
    assert decode_vint(data, 2) == (0x0210, 2)


@pytest.mark.parametrize("width", range(1, 9))
def test_vint_round_trip_every_width(width):
    largest = (1 << (7 * width)) - 2
    for value in (0, 1, largest // 2, largest):
        encoded = encode_vint(value, width)
        assert len(encoded) == width
        assert decode_vint(encoded) == (value, width)


def test_encode_vint_picks_shortest_width():
    assert encode_vint(0) == b"\x80"
    assert encode_vint(126) == b"\xfe"
    # 127 is the reserved all-ones pattern for one byte
    assert encode_vint(127) == b"\x40\x7f"
    assert encode_vint(1000) == b"\x43\xe8"


def test_encode_vint_rejects_values_that_do_not_fit():
    with pytest.raises(ValueError):
        encode_vint(127, 1)
    with pytest.raises(ValueError):
        encode_vint(-1)
    with pytest.raises(ValueError):
        encode_vint(1, 9)


def test_leading_zero_byte_is_malformed():
    with pytest.raises(MalformedVarInt):
        decode_vint(b"\x00\x81")
    with pytest.raises(MalformedVarInt):
        vint_width(0)


def test_vint_width_from_leading_byte():
    assert [vint_width(0x80 >> i) for i in range(8)] == [1, 2, 3, 4, 5, 6, 7, 8]
    assert vint_width(0xFF) == 1
    assert vint_width(0x1F) == 4


def test_decode_vint_never_reads_past_buffer():
    with pytest.raises(TruncatedInput):
        decode_vint(b"\x40")
    with pytest.raises(TruncatedInput):
        decode_vint(b"\x01\x00\x00")


def test_decode_vint_offset_out_of_range():
    with pytest.raises(TruncatedInput):
        decode_vint(b"", 0)
    with pytest.raises(TruncatedInput):
        decode_vint(b"\x81", 1)
