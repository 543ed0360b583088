"""Common test fixtures and utilities."""
import sys

import pytest

from simpleconvert.config import ConversionConfig
from simpleconvert.core.video.types import MasteringDisplay, VideoMetadata

MASTERING_DISPLAY = MasteringDisplay(
    red_x="34000/50000",
    red_y="16000/50000",
    green_x="13250/50000",
    green_y="34500/50000",
    blue_x="7500/50000",
    blue_y="3000/50000",
    white_point_x="15635/50000",
    white_point_y="16450/50000",
    min_luminance="50/10000",
    max_luminance="10000000/10000",
)
MASTER_DISPLAY_STRING = "G(13250,34500)B(7500,3000)R(34000,16000)WP(15635,16450)L(10000000,50)"


def make_metadata(**overrides) -> VideoMetadata:
    """Build SDR 1080p metadata, overriding any field."""
    values = dict(width=1920, height=1080, pix_fmt="yuv420p", duration="3600.000000")
    values.update(overrides)
    return VideoMetadata(**values)


def make_hdr_metadata(**overrides) -> VideoMetadata:
    """Build fully tagged 2160p HDR10 metadata."""
    values = dict(
        width=3840,
        height=2160,
        pix_fmt="yuv420p10le",
        duration="5400.021000",
        color_primaries="bt2020",
        color_space="bt2020nc",
        color_transfer="smpte2084",
        mastering_display=MASTERING_DISPLAY,
    )
    values.update(overrides)
    return VideoMetadata(**values)


@pytest.fixture
def config():
    """Configuration with plain tool names and no host dependent checks."""
    return ConversionConfig(
        ffmpeg="ffmpeg",
        ffprobe="ffprobe",
        x265="x265",
        dovi_tool="dovi_tool",
        min_disk_gb=0,
        show_progress=False,
    )


@pytest.fixture
def mock_video_file(tmp_path):
    """Create a mock video file for testing."""
    video_file = tmp_path / "input.mkv"
    video_file.write_text("mock video content")
    return video_file


@pytest.fixture
def sdr_metadata():
    return make_metadata()


@pytest.fixture
def hdr_metadata():
    return make_hdr_metadata()


@pytest.fixture
def metadata_factory():
    """Build SDR metadata with overrides."""
    return make_metadata


@pytest.fixture
def hdr_metadata_factory():
    """Build HDR10 metadata with overrides."""
    return make_hdr_metadata


@pytest.fixture
def master_display_string():
    return MASTER_DISPLAY_STRING


@pytest.fixture
def hanging_ffprobe(tmp_path):
    """An executable standing in for ffprobe that never answers."""
    script = tmp_path / "ffprobe"
    script.write_text(f"#!{sys.executable}\nimport time\ntime.sleep(30)\n")
    script.chmod(0o755)
    return str(script)
