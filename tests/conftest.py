"""
Pytest configuration for demuxer tests.

Settings overrides (e.g. TIMESTAMP_SCALE_NS) can be placed in a .env file at
the project root; tests that depend on defaults pass explicit values.
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from webm_demuxer.demux.models import Element

# Load .env file from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")


@pytest.fixture
def vp9_elements() -> list[Element]:
    """
    One VP9 video track and one cluster at timestamp 1000 with two blocks:
    a keyframe at +5 ticks and a delta frame at +16 ticks.
    """
    return [
        Element("EBML"),
        Element("DocType", value="webm"),
        Element("Segment"),
        Element("Tracks"),
        Element("TrackEntry"),
        Element("TrackNumber", value=1),
        Element("CodecID", value="V_VP9"),
        Element("TrackType", value=1),
        Element("Cluster"),
        Element("Timestamp", value=1000),
        Element("SimpleBlock", data=bytes([0x81, 0x00, 0x05, 0x80, 0xAA, 0xBB])),
        Element("SimpleBlock", data=bytes([0x81, 0x00, 0x10, 0x00, 0xCC])),
    ]
