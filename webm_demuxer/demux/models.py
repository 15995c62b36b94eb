"""Records produced and consumed by the demuxer."""

from dataclasses import dataclass, field
from enum import Enum


class TrackKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class ChunkKind(str, Enum):
    KEY = "key"
    DELTA = "delta"


@dataclass(frozen=True)
class Element:
    """A single decoded EBML element from the flat element list."""

    name: str
    value: int | float | str | None = None
    data: bytes | None = None


@dataclass(frozen=True)
class Track:
    """Metadata for a single track extracted from a TrackEntry."""

    track_number: int
    codec_id: str
    kind: TrackKind
    codec_private: bytes | None = None  # Codec-specific init data (vpcC, avcC, OpusHead, ...)

    default_duration_ns: int = 0  # Default frame duration in nanoseconds
    pixel_width: int = 0
    pixel_height: int = 0
    language: str | None = None

    @property
    def is_video(self) -> bool:
        return self.kind is TrackKind.VIDEO

    @property
    def is_audio(self) -> bool:
        return self.kind is TrackKind.AUDIO


@dataclass(frozen=True)
class Chunk:
    """A single encoded media sample, shaped for a WebCodecs-style decoder."""

    kind: ChunkKind
    timestamp_us: int  # Absolute presentation timestamp in microseconds
    duration_us: int
    data: bytes

    @property
    def is_keyframe(self) -> bool:
        return self.kind is ChunkKind.KEY


@dataclass(frozen=True)
class ParseResult:
    """Tracks of a container plus the chunks of the selected track."""

    tracks: list[Track] = field(default_factory=list)
    selected_track: Track | None = None
    chunks: list[Chunk] = field(default_factory=list)

    @property
    def video_tracks(self) -> list[Track]:
        return [t for t in self.tracks if t.is_video]

    @property
    def audio_tracks(self) -> list[Track]:
        return [t for t in self.tracks if t.is_audio]

    @property
    def keyframe_count(self) -> int:
        return sum(1 for c in self.chunks if c.is_keyframe)

    @property
    def duration_us(self) -> int:
        """Span from the first chunk's timestamp to the end of the last chunk, or 0."""
        if not self.chunks:
            return 0
        return max(0, self.chunks[-1].timestamp_us + self.chunks[-1].duration_us - self.chunks[0].timestamp_us)
