from webm_demuxer.demux.models import Element, TrackKind
from webm_demuxer.demux.track_table import TrackTableBuilder


def _track_entry(number: int | None, codec_id: str, track_type: int, **extra) -> list[Element]:
    elements = [Element("TrackEntry")]
    if number is not None:
        elements.append(Element("TrackNumber", value=number))
    elements.append(Element("CodecID", value=codec_id))
    elements.append(Element("TrackType", value=track_type))
    for name, value in extra.items():
        if isinstance(value, bytes):
            elements.append(Element(name, data=value))
        else:
            elements.append(Element(name, value=value))
    return elements


def test_builds_tracks_in_first_appearance_order():
    elements = [
        Element("Segment"),
        Element("Tracks"),
        *_track_entry(2, "A_OPUS", 2, CodecPrivate=b"OpusHead"),
        *_track_entry(1, "V_VP9", 1),
    ]

    tracks = TrackTableBuilder().build(elements)

    assert [t.track_number for t in tracks] == [2, 1]
    audio, video = tracks
    assert audio.kind is TrackKind.AUDIO
    assert audio.codec_id == "A_OPUS"
    assert audio.codec_private == b"OpusHead"
    assert video.kind is TrackKind.VIDEO
    assert video.codec_id == "V_VP9"
    assert video.codec_private is None


def test_any_track_type_other_than_one_is_audio():
    elements = [*_track_entry(1, "S_TEXT/UTF8", 17), *_track_entry(2, "A_AAC", 2)]

    tracks = TrackTableBuilder().build(elements)

    assert [t.kind for t in tracks] == [TrackKind.AUDIO, TrackKind.AUDIO]


def test_entries_without_track_number_are_discarded():
    elements = [
        *_track_entry(None, "V_VP8", 1),
        *_track_entry(0, "V_VP8", 1),
        *_track_entry(3, "V_AV1", 1),
    ]

    tracks = TrackTableBuilder().build(elements)

    assert [t.track_number for t in tracks] == [3]


def test_unrecognized_attributes_are_ignored():
    elements = [
        Element("TrackEntry"),
        Element("TrackUID", value=123456789),
        Element("FlagLacing", value=0),
        Element("TrackNumber", value=1),
        Element("0x7E5B", data=b"\x01\x02"),
        Element("CodecID", value="V_VP9"),
        Element("TrackType", value=1),
    ]

    (track,) = TrackTableBuilder().build(elements)

    assert track.track_number == 1
    assert track.codec_id == "V_VP9"


def test_descriptive_metadata_is_collected():
    elements = [
        *_track_entry(1, "V_VP9", 1, DefaultDuration=41_666_666, Language="und"),
        Element("Video"),
        Element("PixelWidth", value=1920),
        Element("PixelHeight", value=1080),
    ]

    (track,) = TrackTableBuilder().build(elements)

    assert track.default_duration_ns == 41_666_666
    assert track.language == "und"
    assert (track.pixel_width, track.pixel_height) == (1920, 1080)


def test_segment_level_element_closes_the_entry():
    elements = [
        *_track_entry(1, "V_VP9", 1),
        Element("Cluster"),
        Element("Timestamp", value=0),
        # Not part of the track entry: it follows a Cluster
        Element("CodecID", value="A_BOGUS"),
    ]

    (track,) = TrackTableBuilder().build(elements)

    assert track.codec_id == "V_VP9"


def test_attributes_before_any_track_entry_are_ignored():
    elements = [
        Element("TrackNumber", value=9),
        Element("CodecID", value="V_VP8"),
        *_track_entry(1, "V_VP9", 1),
    ]

    tracks = TrackTableBuilder().build(elements)

    assert [t.track_number for t in tracks] == [1]


def test_duplicate_track_number_keeps_later_entry_in_place():
    elements = [
        *_track_entry(1, "V_VP8", 1),
        *_track_entry(2, "A_OPUS", 2),
        *_track_entry(1, "V_VP9", 1),
    ]

    tracks = TrackTableBuilder().build(elements)

    assert [(t.track_number, t.codec_id) for t in tracks] == [(1, "V_VP9"), (2, "A_OPUS")]


def test_missing_codec_and_type_use_fallbacks():
    elements = [Element("TrackEntry"), Element("TrackNumber", value=4)]

    (track,) = TrackTableBuilder().build(elements)

    assert track.codec_id == ""
    assert track.kind is TrackKind.AUDIO


def test_codec_private_is_an_independent_copy():
    private = bytearray(b"\x01\x02\x03")
    elements = [*_track_entry(1, "V_VP9", 1), Element("CodecPrivate", data=private)]

    (track,) = TrackTableBuilder().build(elements)
    private[0] = 0xFF

    assert track.codec_private == b"\x01\x02\x03"


def test_no_track_entries_yields_empty_table():
    assert TrackTableBuilder().build([Element("EBML"), Element("Segment")]) == []
