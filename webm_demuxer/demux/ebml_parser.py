"""
Pure Python EBML decoder producing a flat element list.

Walks a WebM/Matroska byte buffer in document order and emits one Element per
EBML element: Master elements are emitted as bare markers (no value, no data)
followed by their children, leaf elements carry their decoded scalar value or
a copy of their binary payload. Nesting is not represented; consumers infer
group boundaries from element names.

Because the walk descends into Master elements instead of skipping them,
known-size and unknown-size (live) Segments and Clusters flatten identically.
"""

import logging
import struct
from collections.abc import Iterator

from webm_demuxer.demux.errors import DecoderFailure, DemuxError
from webm_demuxer.demux.models import Element
from webm_demuxer.demux.vint import decode_vint

logger = logging.getLogger(__name__)

# =============================================================================
# EBML Element IDs (Matroska spec)
# =============================================================================

# EBML header
EBML_HEADER = 0x1A45DFA3
EBML_VERSION = 0x4286
EBML_READ_VERSION = 0x42F7
EBML_MAX_ID_LENGTH = 0x42F2
EBML_MAX_SIZE_LENGTH = 0x42F3
DOC_TYPE = 0x4282
DOC_TYPE_VERSION = 0x4287
DOC_TYPE_READ_VERSION = 0x4285

# Global
VOID = 0xEC
CRC32 = 0xBF

# Top-level
SEGMENT = 0x18538067

# SeekHead
SEEK_HEAD = 0x114D9B74
SEEK = 0x4DBB
SEEK_ID = 0x53AB
SEEK_POSITION = 0x53AC

# Info
INFO = 0x1549A966
SEGMENT_UID = 0x73A4
TIMESTAMP_SCALE = 0x2AD7B1
DURATION = 0x4489
DATE_UTC = 0x4461
TITLE = 0x7BA9
MUXING_APP = 0x4D80
WRITING_APP = 0x5741

# Tracks
TRACKS = 0x1654AE6B
TRACK_ENTRY = 0xAE
TRACK_NUMBER = 0xD7
TRACK_UID = 0x73C5
TRACK_TYPE = 0x83
FLAG_ENABLED = 0xB9
FLAG_DEFAULT = 0x88
FLAG_FORCED = 0x55AA
FLAG_LACING = 0x9C
DEFAULT_DURATION = 0x23E383
NAME = 0x536E
LANGUAGE = 0x22B59C
CODEC_ID = 0x86
CODEC_PRIVATE = 0x63A2
CODEC_NAME = 0x258688
CODEC_DELAY = 0x56AA
SEEK_PRE_ROLL = 0x56BB

# Video track settings
VIDEO = 0xE0
FLAG_INTERLACED = 0x9A
PIXEL_WIDTH = 0xB0
PIXEL_HEIGHT = 0xBA
DISPLAY_WIDTH = 0x54B0
DISPLAY_HEIGHT = 0x54BA
COLOUR = 0x55B0

# Audio track settings
AUDIO = 0xE1
SAMPLING_FREQUENCY = 0xB5
OUTPUT_SAMPLING_FREQUENCY = 0x78B5
CHANNELS = 0x9F
BIT_DEPTH = 0x6264

# Cluster
CLUSTER = 0x1F43B675
CLUSTER_TIMESTAMP = 0xE7
POSITION = 0xA7
PREV_SIZE = 0xAB
SIMPLE_BLOCK = 0xA3
BLOCK_GROUP = 0xA0
BLOCK = 0xA1
BLOCK_DURATION = 0x9B
REFERENCE_BLOCK = 0xFB
DISCARD_PADDING = 0x75A2

# Cues
CUES = 0x1C53BB6B
CUE_POINT = 0xBB
CUE_TIME = 0xB3
CUE_TRACK_POSITIONS = 0xB7
CUE_TRACK = 0xF7
CUE_CLUSTER_POSITION = 0xF1
CUE_RELATIVE_POSITION = 0xF0

# Other Segment children
CHAPTERS = 0x1043A770
ATTACHMENTS = 0x1941A469
TAGS = 0x1254C367
TAG = 0x7373
TARGETS = 0x63C0
SIMPLE_TAG = 0x67C8
TAG_NAME = 0x45A3
TAG_STRING = 0x4487

# Unknown/indeterminate size sentinel
UNKNOWN_SIZE = -1

# Element payload types
MASTER = "master"
UINT = "uint"
INT = "int"
FLOAT = "float"
STRING = "string"
UTF8 = "utf-8"
BINARY = "binary"
DATE = "date"

# element_id -> (name, type)
ELEMENT_SCHEMA: dict[int, tuple[str, str]] = {
    EBML_HEADER: ("EBML", MASTER),
    EBML_VERSION: ("EBMLVersion", UINT),
    EBML_READ_VERSION: ("EBMLReadVersion", UINT),
    EBML_MAX_ID_LENGTH: ("EBMLMaxIDLength", UINT),
    EBML_MAX_SIZE_LENGTH: ("EBMLMaxSizeLength", UINT),
    DOC_TYPE: ("DocType", STRING),
    DOC_TYPE_VERSION: ("DocTypeVersion", UINT),
    DOC_TYPE_READ_VERSION: ("DocTypeReadVersion", UINT),
    VOID: ("Void", BINARY),
    CRC32: ("CRC-32", BINARY),
    SEGMENT: ("Segment", MASTER),
    SEEK_HEAD: ("SeekHead", MASTER),
    SEEK: ("Seek", MASTER),
    SEEK_ID: ("SeekID", BINARY),
    SEEK_POSITION: ("SeekPosition", UINT),
    INFO: ("Info", MASTER),
    SEGMENT_UID: ("SegmentUID", BINARY),
    TIMESTAMP_SCALE: ("TimestampScale", UINT),
    DURATION: ("Duration", FLOAT),
    DATE_UTC: ("DateUTC", DATE),
    TITLE: ("Title", UTF8),
    MUXING_APP: ("MuxingApp", UTF8),
    WRITING_APP: ("WritingApp", UTF8),
    TRACKS: ("Tracks", MASTER),
    TRACK_ENTRY: ("TrackEntry", MASTER),
    TRACK_NUMBER: ("TrackNumber", UINT),
    TRACK_UID: ("TrackUID", UINT),
    TRACK_TYPE: ("TrackType", UINT),
    FLAG_ENABLED: ("FlagEnabled", UINT),
    FLAG_DEFAULT: ("FlagDefault", UINT),
    FLAG_FORCED: ("FlagForced", UINT),
    FLAG_LACING: ("FlagLacing", UINT),
    DEFAULT_DURATION: ("DefaultDuration", UINT),
    NAME: ("Name", UTF8),
    LANGUAGE: ("Language", STRING),
    CODEC_ID: ("CodecID", STRING),
    CODEC_PRIVATE: ("CodecPrivate", BINARY),
    CODEC_NAME: ("CodecName", UTF8),
    CODEC_DELAY: ("CodecDelay", UINT),
    SEEK_PRE_ROLL: ("SeekPreRoll", UINT),
    VIDEO: ("Video", MASTER),
    FLAG_INTERLACED: ("FlagInterlaced", UINT),
    PIXEL_WIDTH: ("PixelWidth", UINT),
    PIXEL_HEIGHT: ("PixelHeight", UINT),
    DISPLAY_WIDTH: ("DisplayWidth", UINT),
    DISPLAY_HEIGHT: ("DisplayHeight", UINT),
    COLOUR: ("Colour", MASTER),
    AUDIO: ("Audio", MASTER),
    SAMPLING_FREQUENCY: ("SamplingFrequency", FLOAT),
    OUTPUT_SAMPLING_FREQUENCY: ("OutputSamplingFrequency", FLOAT),
    CHANNELS: ("Channels", UINT),
    BIT_DEPTH: ("BitDepth", UINT),
    CLUSTER: ("Cluster", MASTER),
    CLUSTER_TIMESTAMP: ("Timestamp", UINT),
    POSITION: ("Position", UINT),
    PREV_SIZE: ("PrevSize", UINT),
    SIMPLE_BLOCK: ("SimpleBlock", BINARY),
    BLOCK_GROUP: ("BlockGroup", MASTER),
    BLOCK: ("Block", BINARY),
    BLOCK_DURATION: ("BlockDuration", UINT),
    REFERENCE_BLOCK: ("ReferenceBlock", INT),
    DISCARD_PADDING: ("DiscardPadding", INT),
    CUES: ("Cues", MASTER),
    CUE_POINT: ("CuePoint", MASTER),
    CUE_TIME: ("CueTime", UINT),
    CUE_TRACK_POSITIONS: ("CueTrackPositions", MASTER),
    CUE_TRACK: ("CueTrack", UINT),
    CUE_CLUSTER_POSITION: ("CueClusterPosition", UINT),
    CUE_RELATIVE_POSITION: ("CueRelativePosition", UINT),
    CHAPTERS: ("Chapters", MASTER),
    ATTACHMENTS: ("Attachments", MASTER),
    TAGS: ("Tags", MASTER),
    TAG: ("Tag", MASTER),
    TARGETS: ("Targets", MASTER),
    SIMPLE_TAG: ("SimpleTag", MASTER),
    TAG_NAME: ("TagName", UTF8),
    TAG_STRING: ("TagString", UTF8),
}


# =============================================================================
# Low-level EBML parsing
# =============================================================================


def read_element_id(data: bytes, pos: int) -> tuple[int, int]:
    """
    Read an EBML element ID. Unlike sizes, IDs keep their VINT marker bit.

    Returns:
        (element_id, new_pos)
    """
    _, length = decode_vint(data, pos)
    eid = 0
    for i in range(length):
        eid = (eid << 8) | data[pos + i]
    return eid, pos + length


def read_element_size(data: bytes, pos: int) -> tuple[int, int]:
    """
    Read an EBML element data size.

    Returns:
        (size, new_pos)  where size may be UNKNOWN_SIZE (-1)
    """
    value, length = decode_vint(data, pos)
    # All value bits set means unknown/indeterminate size
    if value == (1 << (7 * length)) - 1:
        value = UNKNOWN_SIZE
    return value, pos + length


def read_uint(data: bytes, pos: int, length: int) -> int:
    """Read an unsigned integer of N bytes (big-endian)."""
    if length > 8:
        raise DecoderFailure(f"EBML uint must be at most 8 bytes, got {length} at pos {pos}")
    value = 0
    for i in range(length):
        value = (value << 8) | data[pos + i]
    return value


def read_int(data: bytes, pos: int, length: int) -> int:
    """Read a two's complement signed integer of N bytes (big-endian)."""
    if length > 8:
        raise DecoderFailure(f"EBML int must be at most 8 bytes, got {length} at pos {pos}")
    return int.from_bytes(data[pos : pos + length], "big", signed=True)


def read_float(data: bytes, pos: int, length: int) -> float:
    """Read a 4 or 8 byte IEEE float (big-endian). An empty float is 0.0."""
    if length == 0:
        return 0.0
    elif length == 4:
        return struct.unpack(">f", data[pos : pos + 4])[0]
    elif length == 8:
        return struct.unpack(">d", data[pos : pos + 8])[0]
    raise DecoderFailure(f"EBML float must be 4 or 8 bytes, got {length} at pos {pos}")


def read_string(data: bytes, pos: int, length: int) -> str:
    """Read a UTF-8 string of N bytes, stripping null terminators."""
    raw = data[pos : pos + length]
    return raw.rstrip(b"\x00").decode("utf-8", errors="replace")


# =============================================================================
# Element iteration
# =============================================================================


def _is_master(eid: int) -> bool:
    return eid in ELEMENT_SCHEMA and ELEMENT_SCHEMA[eid][1] == MASTER


def iter_elements(data: bytes) -> Iterator[tuple[int, int, int, int]]:
    """
    Iterate over every EBML element in the buffer in document order.

    Master elements are yielded and then descended into; leaf elements are
    yielded and skipped. Iteration stops at the first header that cannot be
    read or leaf that runs past the end of the buffer (truncated prefix).

    Yields:
        (element_id, data_offset, data_size, element_start)
        data_size may be UNKNOWN_SIZE for Master elements.
    """
    pos = 0
    end = len(data)
    while pos < end:
        element_start = pos
        try:
            eid, pos2 = read_element_id(data, pos)
            size, pos3 = read_element_size(data, pos2)
        except DemuxError as e:
            logger.warning("[ebml] Stopping at unreadable element header at pos %d: %s", element_start, e)
            return

        if _is_master(eid):
            yield eid, pos3, size, element_start
            pos = pos3
            continue

        if size == UNKNOWN_SIZE or pos3 + size > end:
            logger.warning(
                "[ebml] Stopping at truncated element 0x%X at pos %d (size=%d, %d bytes available)",
                eid,
                element_start,
                size,
                end - pos3,
            )
            return

        yield eid, pos3, size, element_start
        pos = pos3 + size


def _decode_leaf(eid: int, data: bytes, pos: int, size: int) -> Element:
    name, kind = ELEMENT_SCHEMA.get(eid, (f"0x{eid:X}", BINARY))
    if kind == UINT:
        return Element(name, value=read_uint(data, pos, size))
    elif kind in (INT, DATE):
        return Element(name, value=read_int(data, pos, size))
    elif kind == FLOAT:
        return Element(name, value=read_float(data, pos, size))
    elif kind in (STRING, UTF8):
        return Element(name, value=read_string(data, pos, size))
    return Element(name, data=bytes(data[pos : pos + size]))


def decode(buffer: bytes | bytearray | memoryview) -> list[Element]:
    """
    Decode a WebM/Matroska buffer (or a prefix of one) into a flat element list.

    Raises:
        DecoderFailure: if the buffer is empty, does not start with an EBML
            header, or holds a malformed scalar payload.
    """
    data = bytes(buffer)
    if not data:
        raise DecoderFailure("Empty buffer: expected an EBML header")

    try:
        eid, _ = read_element_id(data, 0)
    except DemuxError as e:
        raise DecoderFailure(f"Not an EBML file: {e}") from e
    if eid != EBML_HEADER:
        raise DecoderFailure(f"Not an EBML file: expected 0x{EBML_HEADER:X}, got 0x{eid:X}")

    elements = []
    for eid, data_off, size, _ in iter_elements(data):
        if _is_master(eid):
            elements.append(Element(ELEMENT_SCHEMA[eid][0]))
        else:
            elements.append(_decode_leaf(eid, data, data_off, size))

    logger.debug("[ebml] Decoded %d elements from %d bytes", len(elements), len(data))
    return elements
