"""
Cluster/SimpleBlock extraction from a flat element list.

Each Cluster contributes the contiguous run of SimpleBlock elements that
directly follows its Timestamp element. Block timestamps are relative to the
cluster timestamp; both are expressed in container ticks and converted to
microseconds with the segment's timestamp scale.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from webm_demuxer.const import (
    BLOCK_HEADER_TAIL_SIZE,
    CLUSTER_NAME,
    CLUSTER_TIMESTAMP_NAME,
    KEYFRAME_FLAG,
    SIMPLE_BLOCK_NAME,
)
from webm_demuxer.demux.errors import MalformedBlock
from webm_demuxer.demux.models import Chunk, ChunkKind, Element, Track
from webm_demuxer.demux.vint import decode_vint

logger = logging.getLogger(__name__)


class _Scope(Enum):
    NO_SCOPE = "no_scope"
    AWAITING_TIMESTAMP = "awaiting_timestamp"
    IN_BLOCK_RUN = "in_block_run"
    CLUSTER_DONE = "cluster_done"


@dataclass(frozen=True)
class SimpleBlockHeader:
    """Decoded header of a SimpleBlock payload."""

    track_number: int
    relative_timestamp: int  # Signed offset from the cluster timestamp, in ticks
    flags: int
    header_size: int  # Bytes consumed by the header; frame data starts here

    @property
    def is_keyframe(self) -> bool:
        return bool(self.flags & KEYFRAME_FLAG)


def parse_simple_block(payload: bytes) -> SimpleBlockHeader:
    """
    Parse the header of a SimpleBlock payload.

    The header is:
    - Track number (VINT, variable length)
    - Relative timestamp (int16, signed, big-endian)
    - Flags byte (bit 7 = keyframe)

    Raises:
        MalformedBlock: if the payload is shorter than its header.
        TruncatedInput, MalformedVarInt: if the track number VINT is invalid.
    """
    if len(payload) < BLOCK_HEADER_TAIL_SIZE:
        raise MalformedBlock(f"SimpleBlock: payload of {len(payload)} bytes is shorter than any block header")

    track_number, pos = decode_vint(payload, 0)
    if len(payload) - pos < BLOCK_HEADER_TAIL_SIZE:
        raise MalformedBlock(
            f"SimpleBlock: need {BLOCK_HEADER_TAIL_SIZE} header bytes after track number at offset {pos}, "
            f"only {len(payload) - pos} available"
        )

    relative_timestamp = int.from_bytes(payload[pos : pos + 2], "big", signed=True)
    flags = payload[pos + 2]

    return SimpleBlockHeader(
        track_number=track_number,
        relative_timestamp=relative_timestamp,
        flags=flags,
        header_size=pos + BLOCK_HEADER_TAIL_SIZE,
    )


class ChunkExtractor:
    """
    Extracts the encoded chunks of one track from a container's element list.

    Args:
        timestamp_scale_ns: Nanoseconds per container tick.
        chunk_duration_us: Duration assigned to every emitted chunk.
    """

    def __init__(self, timestamp_scale_ns: int, chunk_duration_us: int) -> None:
        if timestamp_scale_ns <= 0:
            raise ValueError(f"timestamp_scale_ns must be positive, got {timestamp_scale_ns}")
        self._timestamp_scale_ns = timestamp_scale_ns
        self._chunk_duration_us = chunk_duration_us

    def ticks_to_us(self, ticks: int) -> int:
        """Convert absolute container ticks to microseconds, clamping negative times to 0."""
        if ticks < 0:
            logger.debug("[chunk_extractor] Clamping negative block time %d ticks to 0", ticks)
            return 0
        return ticks * self._timestamp_scale_ns // 1000

    def extract(self, elements: Iterable[Element], track: Track) -> list[Chunk]:
        """
        Return the chunks addressed to track, in file order.

        Clusters without a Timestamp element are skipped. Within a cluster,
        only the SimpleBlocks immediately following the Timestamp are read;
        the first other element ends the cluster's block run.
        """
        chunks = []
        scope = _Scope.NO_SCOPE
        cluster_timestamp = 0
        clusters = 0
        skipped = 0

        for element in elements:
            if element.name == CLUSTER_NAME:
                if scope is _Scope.AWAITING_TIMESTAMP:
                    skipped += 1
                scope = _Scope.AWAITING_TIMESTAMP
                clusters += 1
            elif scope is _Scope.AWAITING_TIMESTAMP:
                if element.name == CLUSTER_TIMESTAMP_NAME and isinstance(element.value, int):
                    cluster_timestamp = element.value
                    scope = _Scope.IN_BLOCK_RUN
            elif scope is _Scope.IN_BLOCK_RUN:
                if element.name != SIMPLE_BLOCK_NAME:
                    scope = _Scope.CLUSTER_DONE
                    continue
                chunk = self._decode_block(element, cluster_timestamp, track.track_number)
                if chunk is not None:
                    chunks.append(chunk)

        if scope is _Scope.AWAITING_TIMESTAMP:
            skipped += 1
        if skipped:
            logger.debug("[chunk_extractor] Skipped %d cluster(s) without a Timestamp", skipped)

        logger.debug(
            "[chunk_extractor] Extracted %d chunks for track #%d from %d clusters",
            len(chunks),
            track.track_number,
            clusters,
        )
        return chunks

    def _decode_block(self, element: Element, cluster_timestamp: int, track_number: int) -> Chunk | None:
        if element.data is None:
            raise MalformedBlock("SimpleBlock: element carries no payload")

        payload = element.data
        header = parse_simple_block(payload)
        if header.track_number != track_number:
            return None

        return Chunk(
            kind=ChunkKind.KEY if header.is_keyframe else ChunkKind.DELTA,
            timestamp_us=self.ticks_to_us(cluster_timestamp + header.relative_timestamp),
            duration_us=self._chunk_duration_us,
            data=bytes(payload[header.header_size :]),
        )
