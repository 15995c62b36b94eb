"""
Exceptions raised while demuxing a WebM/Matroska buffer.

Every error is surfaced to the caller of WebMDemuxer.parse(); none are
recovered internally.
"""


class DemuxError(Exception):
    """Base exception for all demuxing errors."""

    pass


class TruncatedInput(DemuxError):
    """A variable-length integer or block header extends past the available bytes."""

    pass


class MalformedVarInt(DemuxError):
    """A variable-length integer has no width marker in its leading byte."""

    pass


class MalformedBlock(DemuxError):
    """A SimpleBlock payload is shorter than its mandatory header."""

    pass


class DecoderFailure(DemuxError):
    """The element decoder could not turn the buffer into an element list."""

    pass
