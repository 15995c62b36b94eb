"""
EBML variable-length integers (VINT).

The number of leading zero bits in the first byte, plus one, gives the total
width of the integer in bytes (1-8). The bits after the marker bit and the
following width-1 bytes form the big-endian value.
"""

from webm_demuxer.demux.errors import MalformedVarInt, TruncatedInput

MAX_VINT_WIDTH = 8


def vint_width(first_byte: int) -> int:
    """
    Return the VINT width encoded by a leading byte.

    Raises:
        MalformedVarInt: if no marker bit is set (byte 0x00).
    """
    mask = 0x80
    width = 1
    while width <= MAX_VINT_WIDTH:
        if first_byte & mask:
            return width
        width += 1
        mask >>= 1
    raise MalformedVarInt(f"VINT: no width marker in leading byte 0x{first_byte:02X}")


def decode_vint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a VINT starting at offset.

    Returns:
        (value, width) where value has the marker bit removed and width is the
        number of bytes consumed.

    Raises:
        TruncatedInput: if offset is outside the buffer or the VINT runs past its end.
        MalformedVarInt: if the leading byte carries no width marker.
    """
    if offset < 0 or offset >= len(data):
        raise TruncatedInput(f"VINT: offset {offset} beyond data length {len(data)}")

    first = data[offset]
    width = vint_width(first)
    if offset + width > len(data):
        raise TruncatedInput(f"VINT: need {width} bytes at offset {offset}, only {len(data) - offset} available")

    # Drop the marker bit and everything before it
    value = first & ((0x80 >> (width - 1)) - 1)
    for i in range(1, width):
        value = (value << 8) | data[offset + i]

    return value, width


def encode_vint(value: int, width: int | None = None) -> bytes:
    """
    Encode a non-negative integer as a VINT.

    With width omitted the shortest encoding is used. The all-ones pattern of
    each width is reserved (unknown size) and never produced.

    Raises:
        ValueError: if the value is negative or does not fit in the requested width.
    """
    if value < 0:
        raise ValueError(f"VINT: cannot encode negative value {value}")

    if width is None:
        width = 1
        while width < MAX_VINT_WIDTH and value >= (1 << (7 * width)) - 1:
            width += 1

    if not 1 <= width <= MAX_VINT_WIDTH:
        raise ValueError(f"VINT: width must be 1-{MAX_VINT_WIDTH}, got {width}")
    if value >= (1 << (7 * width)) - 1:
        raise ValueError(f"VINT: value {value} does not fit in {width} byte(s)")

    marked = value | (1 << (7 * width))
    return marked.to_bytes(width, "big")
