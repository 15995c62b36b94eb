"""
WebM demuxer package.

Pure Python extraction of tracks and encoded chunks from WebM/Matroska
buffers:

- vint: EBML variable-length integer codec
- ebml_parser: Flattening EBML element decoder
- track_table: TrackEntry scanning into Track records
- chunk_extractor: Cluster/SimpleBlock scanning into Chunk records
- demuxer: WebMDemuxer orchestrator
"""

from webm_demuxer.demux.demuxer import WebMDemuxer, parse
from webm_demuxer.demux.errors import (
    DecoderFailure,
    DemuxError,
    MalformedBlock,
    MalformedVarInt,
    TruncatedInput,
)
from webm_demuxer.demux.models import Chunk, ChunkKind, Element, ParseResult, Track, TrackKind

__all__ = [
    "WebMDemuxer",
    "parse",
    "DemuxError",
    "DecoderFailure",
    "MalformedBlock",
    "MalformedVarInt",
    "TruncatedInput",
    "Chunk",
    "ChunkKind",
    "Element",
    "ParseResult",
    "Track",
    "TrackKind",
]
