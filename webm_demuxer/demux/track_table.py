"""
Track table extraction from a flat element list.

A TrackEntry's attributes are the elements that follow it, up to the next
TrackEntry, the next Segment-level element, or the end of the list.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from webm_demuxer.const import (
    CODEC_ID_NAME,
    CODEC_PRIVATE_NAME,
    DEFAULT_DURATION_NAME,
    LANGUAGE_NAME,
    PIXEL_HEIGHT_NAME,
    PIXEL_WIDTH_NAME,
    SEGMENT_LEVEL_ELEMENTS,
    TRACK_ENTRY_NAME,
    TRACK_NUMBER_NAME,
    TRACK_TYPE_NAME,
    TRACK_TYPE_VIDEO,
)
from webm_demuxer.demux.models import Element, Track, TrackKind

logger = logging.getLogger(__name__)


class _Scope(Enum):
    NO_SCOPE = "no_scope"
    IN_TRACK_ENTRY = "in_track_entry"


@dataclass
class _TrackEntryBuilder:
    """Accumulates TrackEntry attributes until the entry's scope closes."""

    track_number: int | None = None
    codec_id: str | None = None
    track_type: int | None = None
    codec_private: bytes | None = None
    default_duration_ns: int | None = None
    pixel_width: int | None = None
    pixel_height: int | None = None
    language: str | None = None

    def accept(self, element: Element) -> None:
        name = element.name
        if name == TRACK_NUMBER_NAME:
            self.track_number = element.value
        elif name == CODEC_ID_NAME:
            self.codec_id = element.value
        elif name == TRACK_TYPE_NAME:
            self.track_type = element.value
        elif name == CODEC_PRIVATE_NAME:
            self.codec_private = element.data
        elif name == DEFAULT_DURATION_NAME:
            self.default_duration_ns = element.value
        elif name == PIXEL_WIDTH_NAME:
            self.pixel_width = element.value
        elif name == PIXEL_HEIGHT_NAME:
            self.pixel_height = element.value
        elif name == LANGUAGE_NAME:
            self.language = element.value

    def finalize(self) -> Track | None:
        """Return the finished Track, or None if the entry has no usable track number."""
        if not self.track_number:
            return None
        return Track(
            track_number=self.track_number,
            codec_id=self.codec_id or "",
            kind=TrackKind.VIDEO if self.track_type == TRACK_TYPE_VIDEO else TrackKind.AUDIO,
            codec_private=bytes(self.codec_private) if self.codec_private is not None else None,
            default_duration_ns=self.default_duration_ns or 0,
            pixel_width=self.pixel_width or 0,
            pixel_height=self.pixel_height or 0,
            language=self.language,
        )


class TrackTableBuilder:
    """Builds the ordered track table of a container from its element list."""

    def build(self, elements: Iterable[Element]) -> list[Track]:
        """
        Scan elements once and return one Track per usable TrackEntry.

        Entries without a non-zero TrackNumber are discarded. Order follows
        first appearance; if a track number repeats, the later entry replaces
        the earlier one in place.
        """
        tracks: dict[int, Track] = {}
        scope = _Scope.NO_SCOPE
        entry: _TrackEntryBuilder | None = None

        for element in elements:
            if element.name == TRACK_ENTRY_NAME:
                if entry is not None:
                    self._close(entry, tracks)
                entry = _TrackEntryBuilder()
                scope = _Scope.IN_TRACK_ENTRY
            elif scope is _Scope.IN_TRACK_ENTRY:
                if element.name in SEGMENT_LEVEL_ELEMENTS:
                    self._close(entry, tracks)
                    entry = None
                    scope = _Scope.NO_SCOPE
                else:
                    entry.accept(element)

        if entry is not None:
            self._close(entry, tracks)

        logger.debug(
            "[track_table] Built %d tracks: %s",
            len(tracks),
            ", ".join(f"#{t.track_number}={t.codec_id}({t.kind.value})" for t in tracks.values()),
        )
        return list(tracks.values())

    @staticmethod
    def _close(entry: _TrackEntryBuilder, tracks: dict[int, Track]) -> None:
        track = entry.finalize()
        if track is None:
            logger.debug("[track_table] Discarding TrackEntry without a track number")
            return
        if track.track_number in tracks:
            logger.warning("[track_table] Duplicate track number %d, keeping the later entry", track.track_number)
        tracks[track.track_number] = track
