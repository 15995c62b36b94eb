"""
WebM demuxer.

Turns an in-memory WebM/Matroska buffer into a track table and the encoded
chunks of one track, ready to feed a WebCodecs-style video decoder.

Architecture:
  bytes -> element decoder -> flat Element list -> TrackTableBuilder
                                                -> ChunkExtractor -> ParseResult

The demuxer is synchronous and stateless between calls: every parse() builds
its results from scratch and the returned chunks own their payload bytes.
"""

import logging
from collections.abc import Callable, Sequence

from webm_demuxer.configs import settings
from webm_demuxer.const import TIMESTAMP_SCALE_NAME
from webm_demuxer.demux import ebml_parser
from webm_demuxer.demux.chunk_extractor import ChunkExtractor
from webm_demuxer.demux.errors import DecoderFailure, DemuxError
from webm_demuxer.demux.models import Element, ParseResult, Track
from webm_demuxer.demux.track_table import TrackTableBuilder

logger = logging.getLogger(__name__)

ElementDecoder = Callable[[bytes], Sequence[Element]]


class WebMDemuxer:
    """
    Single-pass WebM demuxer.

    Usage:
        demuxer = WebMDemuxer()
        result = demuxer.parse(buffer)
        for chunk in result.chunks:
            decode(chunk)

    Args:
        decoder: Callable turning the raw buffer into a flat element list.
            Defaults to ebml_parser.decode.
        timestamp_scale_ns: Nanoseconds per container tick. When omitted the
            container's TimestampScale is used, falling back to settings.
        chunk_duration_us: Synthetic duration of every chunk. Defaults to settings.

    Raises:
        ValueError: if timestamp_scale_ns is not positive or chunk_duration_us is negative.
    """

    def __init__(
        self,
        decoder: ElementDecoder | None = None,
        timestamp_scale_ns: int | None = None,
        chunk_duration_us: int | None = None,
    ) -> None:
        if timestamp_scale_ns is not None and timestamp_scale_ns <= 0:
            raise ValueError(f"timestamp_scale_ns must be positive, got {timestamp_scale_ns}")
        if chunk_duration_us is not None and chunk_duration_us < 0:
            raise ValueError(f"chunk_duration_us must not be negative, got {chunk_duration_us}")
        self._decoder = decoder or ebml_parser.decode
        self._timestamp_scale_ns = timestamp_scale_ns
        self._chunk_duration_us = settings.chunk_duration_us if chunk_duration_us is None else chunk_duration_us
        self._track_builder = TrackTableBuilder()

    def parse(self, buffer: bytes | bytearray | memoryview, track_number: int | None = None) -> ParseResult:
        """
        Parse a container buffer.

        Args:
            buffer: The container file, or a prefix holding its tracks and clusters.
            track_number: Extract this track instead of the first video track.

        Returns:
            ParseResult with every track, the selected track (None when the
            container has no matching track) and its chunks.

        Raises:
            DecoderFailure, TruncatedInput, MalformedVarInt, MalformedBlock
        """
        elements = self._decode(buffer)

        tracks = self._track_builder.build(elements)
        selected = self._select_track(tracks, track_number)
        if selected is None:
            logger.info(
                "[webm_demuxer] No %s among %d tracks, no chunks extracted",
                "video track" if track_number is None else f"track #{track_number}",
                len(tracks),
            )
            return ParseResult(tracks=tracks, selected_track=None, chunks=[])

        scale_ns = self._resolve_timestamp_scale(elements)
        extractor = ChunkExtractor(scale_ns, self._chunk_duration_us)
        chunks = extractor.extract(elements, selected)

        logger.info(
            "[webm_demuxer] Parsed %d tracks, selected #%d (%s), %d chunks",
            len(tracks),
            selected.track_number,
            selected.codec_id,
            len(chunks),
        )
        return ParseResult(tracks=tracks, selected_track=selected, chunks=chunks)

    def _decode(self, buffer: bytes | bytearray | memoryview) -> Sequence[Element]:
        try:
            return self._decoder(buffer)
        except DemuxError:
            raise
        except Exception as e:
            raise DecoderFailure(f"Element decoder failed: {e}") from e

    @staticmethod
    def _select_track(tracks: list[Track], track_number: int | None) -> Track | None:
        if track_number is not None:
            return next((t for t in tracks if t.track_number == track_number), None)
        return next((t for t in tracks if t.is_video), None)

    def _resolve_timestamp_scale(self, elements: Sequence[Element]) -> int:
        if self._timestamp_scale_ns is not None:
            return self._timestamp_scale_ns
        for element in elements:
            if element.name == TIMESTAMP_SCALE_NAME and isinstance(element.value, int) and element.value > 0:
                return element.value
        return settings.timestamp_scale_ns


def parse(buffer: bytes | bytearray | memoryview, **kwargs) -> ParseResult:
    """Parse a buffer with a default WebMDemuxer. Keyword arguments go to parse()."""
    return WebMDemuxer().parse(buffer, **kwargs)
