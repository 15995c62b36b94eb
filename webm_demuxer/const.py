# Matroska element names as they appear in the decoded element list

EBML_NAME = "EBML"
SEGMENT_NAME = "Segment"
SEEK_HEAD_NAME = "SeekHead"
INFO_NAME = "Info"
TIMESTAMP_SCALE_NAME = "TimestampScale"

TRACKS_NAME = "Tracks"
TRACK_ENTRY_NAME = "TrackEntry"
TRACK_NUMBER_NAME = "TrackNumber"
TRACK_TYPE_NAME = "TrackType"
CODEC_ID_NAME = "CodecID"
CODEC_PRIVATE_NAME = "CodecPrivate"
DEFAULT_DURATION_NAME = "DefaultDuration"
LANGUAGE_NAME = "Language"
PIXEL_WIDTH_NAME = "PixelWidth"
PIXEL_HEIGHT_NAME = "PixelHeight"

CLUSTER_NAME = "Cluster"
CLUSTER_TIMESTAMP_NAME = "Timestamp"
SIMPLE_BLOCK_NAME = "SimpleBlock"

CUES_NAME = "Cues"
CHAPTERS_NAME = "Chapters"
TAGS_NAME = "Tags"
ATTACHMENTS_NAME = "Attachments"

# Elements that can only appear at Segment level (or above). Seeing one
# always means any open TrackEntry has ended.
SEGMENT_LEVEL_ELEMENTS = frozenset(
    {
        EBML_NAME,
        SEGMENT_NAME,
        SEEK_HEAD_NAME,
        INFO_NAME,
        TRACKS_NAME,
        CLUSTER_NAME,
        CUES_NAME,
        CHAPTERS_NAME,
        TAGS_NAME,
        ATTACHMENTS_NAME,
    }
)

# TrackType value for video; any other value is classified as audio
TRACK_TYPE_VIDEO = 1

# Bytes after the track number VINT in a block header: int16 relative
# timestamp + flags byte
BLOCK_HEADER_TAIL_SIZE = 3
KEYFRAME_FLAG = 0x80
