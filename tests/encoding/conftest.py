"""Common test fixtures for encoding tests."""

import pytest

from simpleconvert.core.video.types import CropInfo, EncodeProfile, Route
from simpleconvert.encoding.base import EncodingContext


@pytest.fixture
def context_factory(mock_video_file, tmp_path, sdr_metadata):
    """Create encoding contexts for a mock input."""
    def make(route=Route.SDR, metadata=None, crop=None, profile=None):
        return EncodingContext(
            input_path=mock_video_file,
            output_path=tmp_path / "out" / "output.mkv",
            metadata=metadata or sdr_metadata,
            profile=profile or EncodeProfile(crf=18, preset="faster"),
            route=route,
            crop=crop,
        )
    return make


@pytest.fixture
def letterbox_crop():
    return CropInfo(1920, 800, 0, 140)


@pytest.fixture
def tools_available(mocker):
    """Pretend every external tool is on PATH."""
    return mocker.patch("simpleconvert.encoding.base.shutil.which",
                        side_effect=lambda name: f"/usr/bin/{name}")
